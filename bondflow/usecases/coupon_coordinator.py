"""Coupon steps that run inside a subscription without ever aborting it.

Returning holders get any due coupon claimed before new bonds are bought;
first-time holders get their claim schedule initialized after the purchase.
Every ledger failure in here is logged, reported as ``info`` and returned as a
recoverable outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from bondflow.domain.config import COUPON_PAYMENT
from bondflow.domain.entities import Address, HolderStatus, StatusEvent
from bondflow.domain.errors import LedgerError, NonFatalCouponFailure
from bondflow.domain.ports import LedgerPort

log = logging.getLogger(__name__)


class CouponOutcome(Enum):
    NOT_APPLICABLE = "not_applicable"
    CLAIMED_AUTOMATICALLY = "claimed_automatically"
    CLAIM_FAILED_NON_FATAL = "claim_failed_non_fatal"
    SCHEDULE_INITIALIZED = "schedule_initialized"
    SCHEDULE_INIT_FAILED_NON_FATAL = "schedule_init_failed_non_fatal"


_RECOVERABLE = {
    CouponOutcome.CLAIM_FAILED_NON_FATAL,
    CouponOutcome.SCHEDULE_INIT_FAILED_NON_FATAL,
}


@dataclass(frozen=True)
class CouponResult:
    """Outcome of one coupon step plus the transaction or failure behind it."""

    outcome: CouponOutcome
    tx_hash: Optional[str] = None
    failure: Optional[NonFatalCouponFailure] = None

    @property
    def recoverable_failure(self) -> bool:
        return self.outcome in _RECOVERABLE


def _noop(_: StatusEvent) -> None:
    """Default status sink."""


class CouponCoordinator:
    """Claim or initialize coupons around a subscription."""

    def __init__(
        self,
        ledger: LedgerPort,
        publish: Optional[Callable[[StatusEvent], None]] = None,
    ) -> None:
        self.ledger = ledger
        self.publish = publish or _noop

    def evaluate_and_claim(
        self,
        account: Address,
        holder: HolderStatus,
        signer: Optional[Address] = None,
    ) -> CouponResult:
        """Claim an outstanding coupon for a returning holder.

        First-time holders have nothing to claim yet and get ``NOT_APPLICABLE``
        without any ledger traffic.
        """
        if holder is HolderStatus.FIRST_TIME:
            return CouponResult(CouponOutcome.NOT_APPLICABLE)

        try:
            claimable = bool(self.ledger.read(COUPON_PAYMENT, "canClaim", (account,)))
        except LedgerError as exc:
            return self._downgrade(
                CouponOutcome.CLAIM_FAILED_NON_FATAL,
                f"Could not check coupon eligibility: {exc.message}",
                exc,
            )
        if not claimable:
            log.debug("No coupon due for %s", account)
            return CouponResult(CouponOutcome.NOT_APPLICABLE)

        self.publish(StatusEvent("loading", "Claiming available coupon..."))
        try:
            receipt = self.ledger.send(COUPON_PAYMENT, "claimCoupon", (), signer or account)
        except LedgerError as exc:
            return self._downgrade(
                CouponOutcome.CLAIM_FAILED_NON_FATAL,
                f"Coupon auto-claim failed: {exc.message}",
                exc,
            )

        log.info("Coupon auto-claimed for %s: %s", account, receipt.tx_hash)
        self.publish(StatusEvent("info", "Coupon claimed! Proceeding...", receipt.tx_hash))
        return CouponResult(CouponOutcome.CLAIMED_AUTOMATICALLY, tx_hash=receipt.tx_hash)

    def initialize_schedule(
        self, account: Address, signer: Optional[Address] = None
    ) -> CouponResult:
        """Start the claim schedule after a first-time subscription."""
        try:
            receipt = self.ledger.send(
                COUPON_PAYMENT, "initializeClaim", (account,), signer or account
            )
        except LedgerError as exc:
            return self._downgrade(
                CouponOutcome.SCHEDULE_INIT_FAILED_NON_FATAL,
                f"Coupon schedule initialization failed: {exc.message}",
                exc,
            )
        log.info("Coupon schedule initialized for %s: %s", account, receipt.tx_hash)
        return CouponResult(CouponOutcome.SCHEDULE_INITIALIZED, tx_hash=receipt.tx_hash)

    def _downgrade(
        self, outcome: CouponOutcome, message: str, exc: LedgerError
    ) -> CouponResult:
        log.warning("%s", message)
        failure = NonFatalCouponFailure(message)
        failure.__cause__ = exc
        self.publish(StatusEvent("info", message))
        return CouponResult(outcome, failure=failure)


__all__ = ["CouponCoordinator", "CouponOutcome", "CouponResult"]
