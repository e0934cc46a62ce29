from __future__ import annotations

import pytest

from bondflow.domain.config import SEPOLIA_CHAIN_ID, SEPOLIA_EXPLORER_URL
from bondflow.domain.entities import (
    Balance,
    HolderStatus,
    Price,
    Session,
    StatusEvent,
    TxReceipt,
    UNSET_PRICE,
)
from bondflow.domain.util import format_address, same_address

ACCOUNT = "0x" + "ab" * 20


def test_session_defaults_signer_to_account() -> None:
    session = Session(account=ACCOUNT, chain_id=SEPOLIA_CHAIN_ID)
    assert session.signer == ACCOUNT


def test_session_rejects_empty_account() -> None:
    with pytest.raises(ValueError):
        Session(account=" ", chain_id=1)


def test_price_zero_reading_is_not_initialized() -> None:
    price = Price.from_reading(0)
    assert price.raw == 0
    assert price.initialized is False
    assert price.is_available is False

    assert Price.from_reading(None).initialized is False
    assert Price.from_reading(-5).is_available is False


def test_unset_price_constant_is_not_available() -> None:
    assert UNSET_PRICE.raw == 0
    assert not UNSET_PRICE.initialized
    assert not UNSET_PRICE.is_available


def test_price_positive_reading_is_available() -> None:
    price = Price.from_reading("10050")
    assert price.raw == 10050
    assert price.is_available


def test_balance_requires_non_negative_int() -> None:
    with pytest.raises(TypeError):
        Balance(token="usdt", owner=ACCOUNT, raw=1.0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Balance(token="usdt", owner=ACCOUNT, raw=-1)


def test_holder_status_from_balance() -> None:
    assert HolderStatus.from_balance(0) is HolderStatus.FIRST_TIME
    assert HolderStatus.from_balance(3) is HolderStatus.RETURNING


def test_status_event_validates_kind_and_builds_explorer_link() -> None:
    with pytest.raises(ValueError):
        StatusEvent("warning", "nope")  # type: ignore[arg-type]

    event = StatusEvent("success", "done", "0xabc")
    assert event.explorer_url(SEPOLIA_EXPLORER_URL + "/") == "https://sepolia.etherscan.io/tx/0xabc"
    assert StatusEvent("info", "no tx").explorer_url(SEPOLIA_EXPLORER_URL) is None


def test_tx_receipt_requires_hash() -> None:
    with pytest.raises(ValueError):
        TxReceipt(tx_hash="")
    assert str(TxReceipt(tx_hash="0x01")) == "0x01"


def test_format_address_shortens_long_addresses() -> None:
    assert format_address("0x1234567890abcdef1234567890abcdef12345678") == "0x1234...5678"
    assert format_address("0x1234") == "0x1234"
    assert format_address(None) == ""


def test_same_address_ignores_case() -> None:
    assert same_address(ACCOUNT.upper().replace("0X", "0x"), ACCOUNT)
    assert not same_address(ACCOUNT, None)
