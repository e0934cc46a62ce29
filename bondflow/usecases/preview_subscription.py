from __future__ import annotations

from dataclasses import dataclass

from bondflow.domain.config import SUBSCRIPTION
from bondflow.domain.entities import SubscriptionPreview
from bondflow.domain.ports import LedgerPort


@dataclass
class PreviewSubscription:
    ledger: LedgerPort

    def __call__(self, usdt_raw: int) -> SubscriptionPreview:
        shares, needed, price = self.ledger.read(SUBSCRIPTION, "previewSubscription", (usdt_raw,))
        return SubscriptionPreview(
            shares_to_receive=int(shares),
            actual_usdt_needed=int(needed),
            price_cents=int(price),
        )
