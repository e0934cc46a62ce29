from __future__ import annotations

import pytest

from bondflow.adapters.ledger_mock import LedgerMock
from bondflow.domain.amounts import to_base_units
from bondflow.domain.config import BOND, PAYMENT_TOKEN, SUBSCRIPTION, USDT
from bondflow.domain.errors import InsufficientAllowance, InsufficientBalance
from bondflow.usecases.check_sufficiency import CheckSufficiency
from bondflow.tests.unit.usecases.ledger_fixtures import USER


def _ledger(balance: int, allowance: int) -> LedgerMock:
    ledger = LedgerMock()
    ledger.set_balance(USDT, USER, balance)
    ledger.set_allowance(USDT, USER, ledger.address_of(SUBSCRIPTION), allowance)
    return ledger


def test_hundred_usdt_with_9999_cents_is_insufficient_balance() -> None:
    required = to_base_units("100.00", PAYMENT_TOKEN.decimals)
    assert required == 10000
    ledger = _ledger(balance=9999, allowance=10**9)

    with pytest.raises(InsufficientBalance) as excinfo:
        CheckSufficiency(ledger)(PAYMENT_TOKEN, USER, required)

    assert excinfo.value.message == "Insufficient USDt balance."
    assert excinfo.value.available == 9999


@pytest.mark.parametrize("allowance", [0, 9999, 10**9])
def test_balance_failure_wins_regardless_of_allowance(allowance: int) -> None:
    ledger = _ledger(balance=1, allowance=allowance)
    with pytest.raises(InsufficientBalance):
        CheckSufficiency(ledger)(PAYMENT_TOKEN, USER, 10000)
    assert ledger.methods_called() == ["usdt.balanceOf"]


def test_allowance_failure_only_when_balance_is_enough() -> None:
    ledger = _ledger(balance=10000, allowance=9999)
    with pytest.raises(InsufficientAllowance) as excinfo:
        CheckSufficiency(ledger)(PAYMENT_TOKEN, USER, 10000)
    assert excinfo.value.code == "INSUFFICIENT_ALLOWANCE"
    assert ledger.methods_called() == ["usdt.balanceOf", "usdt.allowance"]


def test_sufficient_funds_return_report() -> None:
    ledger = _ledger(balance=10000, allowance=10000)
    report = CheckSufficiency(ledger)(PAYMENT_TOKEN, USER, 10000)
    assert report.balance.raw == 10000
    assert report.allowance.spender == ledger.address_of(SUBSCRIPTION)


def test_bond_token_uses_its_own_contract() -> None:
    ledger = LedgerMock()
    with pytest.raises(InsufficientBalance) as excinfo:
        CheckSufficiency(ledger)(BOND, USER, 1)
    assert excinfo.value.message == "Insufficient AAPL50 balance."
