from __future__ import annotations

import logging
from dataclasses import dataclass

from bondflow.domain.amounts import AmountInput, to_positive_base_units
from bondflow.domain.config import SUBSCRIPTION
from bondflow.domain.entities import Address, TokenDescriptor, TxReceipt
from bondflow.domain.ports import LedgerPort
from bondflow.usecases.error_mapping import map_ledger_error

log = logging.getLogger(__name__)


@dataclass
class ApproveToken:
    """Grant the subscription contract an allowance of ``amount`` tokens."""

    ledger: LedgerPort

    def __call__(self, token: TokenDescriptor, amount: AmountInput, signer: Address) -> TxReceipt:
        raw = to_positive_base_units(amount, token.decimals)
        spender = self.ledger.address_of(SUBSCRIPTION)
        try:
            receipt = self.ledger.send(token.contract, "approve", (spender, raw), signer)
        except Exception as exc:
            raise map_ledger_error(
                exc,
                default_code="APPROVE_FAILED",
                default_message=f"Failed to approve {token.symbol.upper()}.",
            ) from exc
        log.info("Approved %d %s base units for %s: %s", raw, token.symbol, spender, receipt)
        return receipt
