from __future__ import annotations

from typing import List

from bondflow.adapters.ledger_mock import DEFAULT_ISSUER
from bondflow.domain.config import BOND_TOKEN, COUPON_PAYMENT, PRICE_ORACLE, SUBSCRIPTION, USDT
from bondflow.domain.entities import StatusEvent
from bondflow.usecases.error_mapping import REDEEM_REVERT_HINT
from bondflow.tests.unit.usecases.ledger_fixtures import (
    USER,
    funded_ledger,
    kinds,
    make_coordinator,
    session,
)


def test_redeem_success_pays_out_at_oracle_price() -> None:
    events: List[StatusEvent] = []
    ledger = funded_ledger(usdt=0, usdt_allowance=0, bonds=5, bond_allowance=5)

    result = make_coordinator(ledger, events).redeem(session(), "2")

    assert result.ok
    assert result.amount_raw == 2
    assert result.price.raw == 10000
    assert ledger.methods_called("send") == [
        f"{PRICE_ORACLE}.requestPriceUpdate",
        f"{SUBSCRIPTION}.redeem",
    ]
    assert ledger.balance_of(BOND_TOKEN, USER) == 3
    assert ledger.balance_of(USDT, USER) == 20000
    assert [e.message for e in events if e.kind == "loading"] == [
        "1/3: Updating price...",
        "2/3: Processing redemption...",
    ]
    assert kinds(events).count("success") == 1
    assert events[-1].message == "3/3: Redemption successful!"
    assert events[-1].tx_hash == result.tx_hash


def test_redeem_never_touches_coupon_contract() -> None:
    ledger = funded_ledger(bonds=5, bond_allowance=5)
    make_coordinator(ledger, []).redeem(session(), "1")
    assert not [m for m in ledger.methods_called() if m.startswith(COUPON_PAYMENT)]


def test_fractional_bond_amount_is_truncated() -> None:
    ledger = funded_ledger(bonds=5, bond_allowance=5)
    result = make_coordinator(ledger, []).redeem(session(), "1.5")
    assert result.ok
    assert result.amount_raw == 1
    assert ledger.balance_of(BOND_TOKEN, USER) == 4


def test_amount_below_one_bond_is_invalid() -> None:
    events: List[StatusEvent] = []
    ledger = funded_ledger(bonds=5, bond_allowance=5)

    result = make_coordinator(ledger, events).redeem(session(), "0.4")

    assert result.error.code == "INVALID_AMOUNT"
    assert ledger.calls == []
    assert kinds(events) == ["error"]


def test_missing_allowance_stops_before_redeem() -> None:
    events: List[StatusEvent] = []
    ledger = funded_ledger(bonds=5, bond_allowance=0)

    result = make_coordinator(ledger, events).redeem(session(), "2")

    assert not result.ok
    assert result.error.code == "INSUFFICIENT_ALLOWANCE"
    assert events[-1].message == "Insufficient AAPL50 allowance. Please approve first."
    assert f"{SUBSCRIPTION}.redeem" not in ledger.methods_called()


def test_issuer_shortfall_reverts_with_redeem_checklist() -> None:
    events: List[StatusEvent] = []
    ledger = funded_ledger(bonds=5, bond_allowance=5)
    ledger.set_balance(USDT, DEFAULT_ISSUER, 0)

    result = make_coordinator(ledger, events).redeem(session(), "2")

    assert result.error.code == "TX_REVERTED"
    assert events[-1].message == REDEEM_REVERT_HINT
    assert kinds(events).count("error") == 1
    assert ledger.balance_of(BOND_TOKEN, USER) == 5


def test_price_request_revert_on_redeem_keeps_node_message() -> None:
    events: List[StatusEvent] = []
    ledger = funded_ledger(bonds=5, bond_allowance=5)
    ledger.fail_on(PRICE_ORACLE, "requestPriceUpdate", "execution reverted: oracle out of LINK")

    result = make_coordinator(ledger, events).redeem(session(), "2")

    assert result.error.code == "REMOTE_SEND_FAILED"
    assert events[-1].message == "execution reverted: oracle out of LINK"
    assert f"{SUBSCRIPTION}.redeem" not in ledger.methods_called()
    assert ledger.balance_of(BOND_TOKEN, USER) == 5
