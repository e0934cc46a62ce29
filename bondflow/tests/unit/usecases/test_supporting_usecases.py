from __future__ import annotations

import pytest

from bondflow.adapters.ledger_mock import LedgerMock
from bondflow.domain.config import (
    BOND,
    BOND_TOKEN,
    COUPON_PAYMENT,
    PAYMENT_TOKEN,
    SUBSCRIPTION,
    USDT,
)
from bondflow.domain.entities import CouponState, HolderStatus, Session
from bondflow.domain.errors import InvalidAmount, NotConnected, RemoteReadError, WrongNetwork
from bondflow.domain.ports import UseCaseError
from bondflow.usecases.approve_token import ApproveToken
from bondflow.usecases.claim_coupon import ClaimCoupon
from bondflow.usecases.classify_holder import ClassifyHolder
from bondflow.usecases.ensure_session import EnsureSession
from bondflow.usecases.fetch_balances import FetchBalances
from bondflow.usecases.fetch_coupon_status import FetchCouponStatus
from bondflow.usecases.preview_subscription import PreviewSubscription
from bondflow.tests.unit.usecases.ledger_fixtures import NOW, USER


def _ledger(**kwargs) -> LedgerMock:
    return LedgerMock(clock=lambda: NOW, **kwargs)


# ---------------------------------------------------------------------------
# ApproveToken
# ---------------------------------------------------------------------------


def test_approve_converts_amount_and_targets_subscription() -> None:
    ledger = _ledger()
    receipt = ApproveToken(ledger)(PAYMENT_TOKEN, "12.345", USER)

    spender = ledger.address_of(SUBSCRIPTION)
    assert receipt.tx_hash.startswith("0x")
    assert ledger.calls[-1] == ("send", USDT, "approve", (spender, 1234))
    assert ledger.allowance_of(USDT, USER, spender) == 1234


def test_approve_rejects_invalid_amount_before_sending() -> None:
    ledger = _ledger()
    with pytest.raises(InvalidAmount):
        ApproveToken(ledger)(BOND, "0.5", USER)
    assert ledger.calls == []


def test_approve_failure_is_mapped() -> None:
    ledger = _ledger()
    ledger.fail_on(BOND_TOKEN, "approve", "user rejected request")
    with pytest.raises(UseCaseError) as info:
        ApproveToken(ledger)(BOND, "3", USER)
    assert info.value.code == "REMOTE_SEND_FAILED"
    assert info.value.message == "user rejected request"


# ---------------------------------------------------------------------------
# FetchBalances / ClassifyHolder
# ---------------------------------------------------------------------------


def test_fetch_balances_reads_both_tokens_and_price() -> None:
    ledger = _ledger(price_cents=15050)
    ledger.set_balance(USDT, USER, 123456)
    ledger.set_balance(BOND_TOKEN, USER, 7)

    snapshot = FetchBalances(ledger)(USER)

    assert (snapshot.usdt_raw, snapshot.usdt_decimals) == (123456, 2)
    assert (snapshot.bond_raw, snapshot.bond_decimals) == (7, 0)
    assert snapshot.price.raw == 15050
    assert snapshot.price.is_available


def test_fetch_balances_propagates_read_errors() -> None:
    ledger = _ledger()
    ledger.fail_on(USDT, "decimals", "timeout")
    with pytest.raises(RemoteReadError):
        FetchBalances(ledger)(USER)


@pytest.mark.parametrize("raw,expected", [(0, HolderStatus.FIRST_TIME), (1, HolderStatus.RETURNING)])
def test_classify_holder(raw: int, expected: HolderStatus) -> None:
    ledger = _ledger()
    ledger.set_balance(BOND_TOKEN, USER, raw)
    assert ClassifyHolder(ledger)(USER) is expected


# ---------------------------------------------------------------------------
# Coupon status and manual claim
# ---------------------------------------------------------------------------


def test_coupon_status_uninitialized() -> None:
    state = FetchCouponStatus(_ledger())(USER)
    assert state == CouponState()


def test_coupon_status_due() -> None:
    ledger = _ledger()
    ledger.set_balance(BOND_TOKEN, USER, 3)
    ledger.set_next_claim(USER, NOW - 5)

    state = FetchCouponStatus(ledger)(USER)

    assert state.initialized
    assert state.can_claim
    assert state.next_claim_ts == NOW - 5
    assert state.claimable_raw == 3 * ledger.coupon_per_token_cents


def test_claim_refused_locally_when_not_claimable() -> None:
    ledger = _ledger()
    with pytest.raises(UseCaseError) as info:
        ClaimCoupon(ledger)(CouponState(next_claim_ts=NOW + 10, initialized=True), USER)
    assert info.value.code == "COUPON_NOT_CLAIMABLE"
    assert ledger.calls == []


def test_claim_sends_and_maps_reverts() -> None:
    ledger = _ledger()
    ledger.set_balance(BOND_TOKEN, USER, 1)
    ledger.set_next_claim(USER, NOW)
    state = FetchCouponStatus(ledger)(USER)

    receipt = ClaimCoupon(ledger)(state, USER)
    assert receipt.tx_hash
    assert ledger.balance_of(USDT, USER) == ledger.coupon_per_token_cents

    # Second claim in the same window reverts on the ledger side.
    with pytest.raises(UseCaseError) as info:
        ClaimCoupon(ledger)(state, USER)
    assert info.value.code == "REMOTE_SEND_FAILED"
    assert "coupon not claimable" in info.value.message
    assert ledger.methods_called("send") == [f"{COUPON_PAYMENT}.claimCoupon"] * 2


# ---------------------------------------------------------------------------
# Preview and session guard
# ---------------------------------------------------------------------------


def test_preview_subscription() -> None:
    preview = PreviewSubscription(_ledger(price_cents=15000))(40000)
    assert preview.shares_to_receive == 2
    assert preview.actual_usdt_needed == 30000
    assert preview.price_cents == 15000


def test_ensure_session() -> None:
    guard = EnsureSession(chain_id=11155111)
    ok = Session(account=USER, chain_id=11155111)

    assert guard(ok) is ok
    with pytest.raises(NotConnected):
        guard(None)
    with pytest.raises(WrongNetwork) as info:
        guard(Session(account=USER, chain_id=1))
    assert info.value.expected == 11155111
    assert info.value.actual == 1
