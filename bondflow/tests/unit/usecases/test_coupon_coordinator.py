from __future__ import annotations

from typing import List

from bondflow.adapters.ledger_mock import LedgerMock
from bondflow.domain.config import BOND_TOKEN, COUPON_PAYMENT
from bondflow.domain.entities import HolderStatus, StatusEvent
from bondflow.domain.errors import RemoteSendError
from bondflow.usecases.coupon_coordinator import CouponCoordinator, CouponOutcome
from bondflow.tests.unit.usecases.ledger_fixtures import NOW, USER


def _ledger(*, next_claim: int = 0) -> LedgerMock:
    ledger = LedgerMock(clock=lambda: NOW)
    ledger.set_balance(BOND_TOKEN, USER, 2)
    if next_claim:
        ledger.set_next_claim(USER, next_claim)
    return ledger


def test_first_time_holder_is_not_applicable_without_ledger_traffic() -> None:
    ledger = _ledger()
    result = CouponCoordinator(ledger).evaluate_and_claim(USER, HolderStatus.FIRST_TIME)
    assert result.outcome is CouponOutcome.NOT_APPLICABLE
    assert ledger.calls == []


def test_returning_holder_without_due_coupon_is_not_applicable() -> None:
    ledger = _ledger(next_claim=NOW + 100)
    result = CouponCoordinator(ledger).evaluate_and_claim(USER, HolderStatus.RETURNING)
    assert result.outcome is CouponOutcome.NOT_APPLICABLE
    assert "coupon_payment.claimCoupon" not in ledger.methods_called()


def test_returning_holder_claims_due_coupon() -> None:
    events: List[StatusEvent] = []
    ledger = _ledger(next_claim=NOW - 1)

    result = CouponCoordinator(ledger, events.append).evaluate_and_claim(
        USER, HolderStatus.RETURNING
    )

    assert result.outcome is CouponOutcome.CLAIMED_AUTOMATICALLY
    assert result.tx_hash
    assert [(e.kind, e.message) for e in events] == [
        ("loading", "Claiming available coupon..."),
        ("info", "Coupon claimed! Proceeding..."),
    ]


def test_claim_failure_is_downgraded_to_info() -> None:
    events: List[StatusEvent] = []
    ledger = _ledger(next_claim=NOW - 1)
    ledger.fail_on(COUPON_PAYMENT, "claimCoupon", "execution reverted: paused")

    result = CouponCoordinator(ledger, events.append).evaluate_and_claim(
        USER, HolderStatus.RETURNING
    )

    assert result.outcome is CouponOutcome.CLAIM_FAILED_NON_FATAL
    assert result.recoverable_failure
    assert result.failure is not None
    assert result.failure.code == "COUPON_NON_FATAL"
    assert isinstance(result.failure.__cause__, RemoteSendError)
    assert events[-1].kind == "info"
    assert "paused" in events[-1].message


def test_eligibility_read_failure_is_downgraded() -> None:
    ledger = _ledger()
    ledger.fail_on(COUPON_PAYMENT, "canClaim", "timeout")
    result = CouponCoordinator(ledger).evaluate_and_claim(USER, HolderStatus.RETURNING)
    assert result.outcome is CouponOutcome.CLAIM_FAILED_NON_FATAL


def test_initialize_schedule_success_and_failure() -> None:
    ledger = _ledger()
    coordinator = CouponCoordinator(ledger)

    first = coordinator.initialize_schedule(USER)
    assert first.outcome is CouponOutcome.SCHEDULE_INITIALIZED
    assert not first.recoverable_failure

    again = coordinator.initialize_schedule(USER)
    assert again.outcome is CouponOutcome.SCHEDULE_INIT_FAILED_NON_FATAL
    assert "already initialized" in again.failure.message
