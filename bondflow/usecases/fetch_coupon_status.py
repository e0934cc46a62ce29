from __future__ import annotations

from dataclasses import dataclass

from bondflow.domain.config import COUPON_PAYMENT
from bondflow.domain.entities import Address, CouponState
from bondflow.domain.ports import LedgerPort


@dataclass
class FetchCouponStatus:
    """Read the coupon schedule, eligibility and amount for ``account``."""

    ledger: LedgerPort

    def __call__(self, account: Address) -> CouponState:
        next_ts = int(self.ledger.read(COUPON_PAYMENT, "getNextClaimTime", (account,)))
        can_claim = bool(self.ledger.read(COUPON_PAYMENT, "canClaim", (account,)))
        amount = int(self.ledger.read(COUPON_PAYMENT, "calculateCoupon", (account,)))
        return CouponState(
            next_claim_ts=next_ts,
            claimable_raw=amount,
            can_claim=can_claim,
            initialized=next_ts > 0,
        )
