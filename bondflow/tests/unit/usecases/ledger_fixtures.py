from __future__ import annotations

from typing import List

from bondflow.adapters.ledger_mock import DEFAULT_ISSUER, LedgerMock
from bondflow.domain.config import BOND_TOKEN, SUBSCRIPTION, USDT, SettingsConfig
from bondflow.domain.entities import Session, StatusEvent
from bondflow.usecases.refresh_price import RefreshPrice
from bondflow.usecases.trade_flow_coordinator import FlowHooks, TradeFlowCoordinator

USER = "0x" + "ab" * 20
NOW = 1_700_000_000


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self) -> None:
        self.t = 0.0
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


def funded_ledger(
    *,
    usdt: int = 100000,
    bonds: int = 0,
    usdt_allowance: int = 100000,
    bond_allowance: int = 0,
    price_cents: int = 10000,
) -> LedgerMock:
    """Ledger whose oracle publishes ``price_cents`` on the first read after a request."""
    ledger = LedgerMock(pending_price_cents=price_cents, clock=lambda: NOW)
    spender = ledger.address_of(SUBSCRIPTION)
    ledger.set_balance(USDT, USER, usdt)
    ledger.set_balance(BOND_TOKEN, USER, bonds)
    ledger.set_allowance(USDT, USER, spender, usdt_allowance)
    ledger.set_allowance(BOND_TOKEN, USER, spender, bond_allowance)
    ledger.set_balance(USDT, DEFAULT_ISSUER, 10_000_000)
    ledger.set_balance(BOND_TOKEN, DEFAULT_ISSUER, 1000)
    return ledger


def session(chain_id: int | None = None) -> Session:
    settings = SettingsConfig()
    return Session(account=USER, chain_id=settings.chain_id if chain_id is None else chain_id)


def make_coordinator(
    ledger: LedgerMock,
    events: List[StatusEvent],
    *,
    clock: FakeClock | None = None,
    hooks: FlowHooks | None = None,
) -> TradeFlowCoordinator:
    clock = clock or FakeClock()
    refresh = RefreshPrice(ledger, poll_interval_ms=1000, sleep=clock.sleep, clock=clock.now)
    return TradeFlowCoordinator(
        ledger,
        SettingsConfig(),
        events.append,
        uc_refresh_price=refresh,
        hooks=hooks,
    )


def kinds(events: List[StatusEvent]) -> List[str]:
    return [event.kind for event in events]
