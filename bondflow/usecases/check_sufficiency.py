from __future__ import annotations

import logging
from dataclasses import dataclass

from bondflow.domain.config import SUBSCRIPTION
from bondflow.domain.entities import Address, Allowance, Balance, TokenDescriptor
from bondflow.domain.errors import InsufficientAllowance, InsufficientBalance
from bondflow.domain.ports import LedgerPort

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SufficiencyReport:
    """Balance and allowance observed by the last successful check."""

    balance: Balance
    allowance: Allowance


@dataclass
class CheckSufficiency:
    """Advisory balance/allowance check before a value-moving call.

    Another transfer can land between this check and the following send; the
    ledger's own rejection stays authoritative.
    """

    ledger: LedgerPort

    def __call__(
        self, token: TokenDescriptor, owner: Address, required: int
    ) -> SufficiencyReport:
        balance_raw = int(self.ledger.read(token.contract, "balanceOf", (owner,)))
        balance = Balance(token=token.contract, owner=owner, raw=balance_raw)
        log.debug("%s balance of %s: %d (required %d)", token.symbol, owner, balance_raw, required)
        if balance.raw < required:
            raise InsufficientBalance(token.symbol, required=required, available=balance.raw)

        spender = self.ledger.address_of(SUBSCRIPTION)
        allowance_raw = int(self.ledger.read(token.contract, "allowance", (owner, spender)))
        allowance = Allowance(
            token=token.contract, owner=owner, spender=spender, raw=allowance_raw
        )
        log.debug("%s allowance for %s: %d", token.symbol, spender, allowance_raw)
        if allowance.raw < required:
            raise InsufficientAllowance(token.symbol, required=required, available=allowance.raw)

        return SufficiencyReport(balance=balance, allowance=allowance)


__all__ = ["CheckSufficiency", "SufficiencyReport"]
