from __future__ import annotations

from bondflow.adapters.ledger_mock import LedgerMock
from bondflow.domain.config import PRICE_ORACLE
from bondflow.usecases.refresh_price import RefreshPrice
from bondflow.tests.unit.usecases.ledger_fixtures import USER, FakeClock


def _reads(ledger: LedgerMock) -> int:
    return ledger.methods_called("read").count(f"{PRICE_ORACLE}.getLatestPriceUSD")


def test_unchanging_zero_price_returns_after_budget_without_error() -> None:
    ledger = LedgerMock(price_cents=0)
    clock = FakeClock()
    uc = RefreshPrice(ledger, poll_interval_ms=1000, sleep=clock.sleep, clock=clock.now)

    price = uc(USER, 10000)

    assert price.raw == 0
    assert price.initialized is False
    assert len(clock.sleeps) <= 10
    assert all(s == 1.0 for s in clock.sleeps)
    assert _reads(ledger) == len(clock.sleeps) + 1
    assert ledger.methods_called("send") == [f"{PRICE_ORACLE}.requestPriceUpdate"]


def test_unchanging_nonzero_price_returns_last_observed_value() -> None:
    ledger = LedgerMock(price_cents=9950)
    clock = FakeClock()
    uc = RefreshPrice(ledger, poll_interval_ms=1000, sleep=clock.sleep, clock=clock.now)

    price = uc(USER, 10000)

    assert price.raw == 9950
    assert price.is_available
    assert len(clock.sleeps) <= 10


def test_stops_polling_once_price_is_published() -> None:
    ledger = LedgerMock(pending_price_cents=10100, price_update_delay_reads=3)
    clock = FakeClock()
    uc = RefreshPrice(ledger, poll_interval_ms=1000, sleep=clock.sleep, clock=clock.now)

    price = uc(USER)

    assert price.raw == 10100
    assert _reads(ledger) == 4
    assert len(clock.sleeps) == 3


def test_zero_budget_reads_once() -> None:
    ledger = LedgerMock(price_cents=0)
    clock = FakeClock()
    receipts = []
    uc = RefreshPrice(
        ledger, sleep=clock.sleep, clock=clock.now, on_requested=receipts.append
    )

    uc(USER, max_wait_ms=0)

    assert clock.sleeps == []
    assert _reads(ledger) == 1
    assert len(receipts) == 1
