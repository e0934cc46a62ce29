from __future__ import annotations

import logging
from dataclasses import dataclass

from bondflow.domain.config import BOND
from bondflow.domain.entities import Address, HolderStatus, TokenDescriptor
from bondflow.domain.ports import LedgerPort

log = logging.getLogger(__name__)


@dataclass
class ClassifyHolder:
    """Classify an account as first-time or returning bond holder."""

    ledger: LedgerPort
    token: TokenDescriptor = BOND

    def __call__(self, account: Address) -> HolderStatus:
        raw = int(self.ledger.read(self.token.contract, "balanceOf", (account,)))
        holder = HolderStatus.from_balance(raw)
        log.info("%s balance %d -> %s holder", self.token.symbol, raw, holder.value)
        return holder


__all__ = ["ClassifyHolder"]
