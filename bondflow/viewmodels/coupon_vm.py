from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from ..domain.amounts import from_base_units
from ..domain.config import PAYMENT_TOKEN
from ..domain.countdown import NOT_INITIALIZED, Countdown, describe_remaining
from ..domain.entities import CouponState, Session
from ..domain.errors import LedgerError
from ..domain.ports import UseCaseError
from ..usecases.claim_coupon import ClaimCoupon
from ..usecases.fetch_coupon_status import FetchCouponStatus
from .status_channel import StatusChannel

log = logging.getLogger(__name__)


class CouponVM:
    """Coupon panel state: schedule, claimable amount and countdown label."""

    def __init__(
        self,
        *,
        status: StatusChannel,
        session: Callable[[], Optional[Session]],
        uc_fetch: FetchCouponStatus,
        uc_claim: ClaimCoupon,
        clock: Callable[[], float] = time.time,
        on_changed: Optional[Callable[["CouponVM"], None]] = None,
    ) -> None:
        self.status = status
        self.session = session
        self.uc_fetch = uc_fetch
        self.uc_claim = uc_claim
        self.clock = clock
        self.on_changed = on_changed

        self.state = CouponState()
        self.countdown: Countdown = NOT_INITIALIZED

    @property
    def amount_label(self) -> str:
        return from_base_units(
            self.state.claimable_raw, PAYMENT_TOKEN.decimals, 2, min_fraction_digits=2
        )

    @property
    def next_claim_label(self) -> str:
        if not self.state.initialized:
            return "Not set"
        return datetime.fromtimestamp(self.state.next_claim_ts).strftime("%Y-%m-%d %H:%M:%S")

    def refresh(self) -> bool:
        """Re-read the coupon contract; failures keep the previous state."""
        session = self.session()
        if session is None:
            return False
        try:
            self.state = self.uc_fetch(session.account)
        except LedgerError as exc:
            log.warning("Failed to fetch coupon status: %s", exc.message)
            return False
        self.tick()
        return True

    def tick(self) -> Countdown:
        """Recompute the countdown label from the cached schedule."""
        self.countdown = describe_remaining(self.state.next_claim_ts, int(self.clock()))
        if self.on_changed:
            self.on_changed(self)
        return self.countdown

    def cmd_claim(self) -> bool:
        session = self.session()
        if session is None:
            self.status.error("Please connect wallet first.")
            return False
        amount = self.amount_label
        self.status.loading("Claiming coupon...")
        try:
            receipt = self.uc_claim(self.state, session.signer)
        except UseCaseError as exc:
            self.status.error(exc.message)
            return False
        self.status.success(f"Coupon claimed successfully! Received ${amount}", receipt.tx_hash)
        self.refresh()
        return True

    def cmd_check_status(self) -> str:
        self.status.loading("Checking coupon status...")
        self.refresh()
        text = "\n".join(
            [
                f"Next Claim: {self.next_claim_label}",
                f"Coupon Amount: ${self.amount_label}",
                f"Can Claim: {'Yes' if self.state.can_claim else 'No'}",
                f"Time Remaining: {self.countdown.label}",
            ]
        )
        self.status.info(text)
        return text


__all__ = ["CouponVM"]
