from __future__ import annotations

import json
from pathlib import Path

import pytest

from bondflow.app import main as cli
from bondflow.adapters.storage_local import SETTINGS_FILENAME


@pytest.fixture(autouse=True)
def _no_rpc_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(cli.RPC_URL_ENV, raising=False)


def _run(tmp_path: Path, *args: str) -> int:
    return cli.main(["--mock", "--settings-dir", str(tmp_path), *args])


def test_subscribe_with_approval(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = _run(tmp_path, "subscribe", "100", "--approve")

    out = capsys.readouterr().out
    assert code == 0
    assert "[success] USDT approved!" in out
    assert "[loading] 1/4: Updating bond price..." in out
    assert "[success] Subscription successful! Coupon schedule set." in out
    assert "https://sepolia.etherscan.io/tx/0x" in out


def test_subscribe_without_approval_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = _run(tmp_path, "subscribe", "100")

    assert code == 1
    assert "[error] Insufficient USDt allowance. Please approve first." in capsys.readouterr().out


def test_invalid_amount(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "subscribe", "abc") == 1
    assert "[error] Please enter a valid amount." in capsys.readouterr().out


def test_balances_and_coupon(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "balances") == 0
    out = capsys.readouterr().out
    assert "USDt: 1000" in out
    assert "AAPL50: 0" in out
    assert "Price: Not set" in out

    assert _run(tmp_path, "coupon") == 0
    assert "Time Remaining: Not initialized" in capsys.readouterr().out


def test_price_and_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "price") == 0
    assert "[success] Price updated!" in capsys.readouterr().out

    assert _run(tmp_path, "status", "--amount", "100") == 0
    assert "SYSTEM STATUS:" in capsys.readouterr().out


def test_claim_without_coupon(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "claim") == 1
    assert "No coupon is available to claim yet." in capsys.readouterr().out


def test_wrong_chain_is_rejected(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "--chain-id", "1", "redeem", "1") == 1
    assert "Wrong network (chain 1)" in capsys.readouterr().out


def test_stored_settings_are_applied(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / SETTINGS_FILENAME).write_text(
        json.dumps({"explorer_url": "https://explorer.test"}), encoding="utf-8"
    )
    assert _run(tmp_path, "approve", "usdt", "5") == 0
    assert "https://explorer.test/tx/0x" in capsys.readouterr().out


def test_missing_account_without_mock(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pytest.importorskip("web3")
    code = cli.main(["--settings-dir", str(tmp_path), "coupon"])
    assert code == 1
    assert "Please connect wallet first." in capsys.readouterr().out
