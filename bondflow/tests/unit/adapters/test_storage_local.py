from __future__ import annotations

import json
from pathlib import Path

import pytest

from bondflow.adapters.http_client import HttpConfig, build_session
from bondflow.adapters.storage_local import StorageLocal


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))
    assert storage.load_settings() == {}


def test_save_then_load(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path / "cfg"))
    storage.save_settings({"rpc_url": "http://node:8545", "price_max_wait_ms": 5000})

    assert Path(storage.path).exists()
    assert storage.load_settings() == {"rpc_url": "http://node:8545", "price_max_wait_ms": 5000}


def test_non_object_file_is_rejected(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))
    Path(storage.path).write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(ValueError):
        storage.load_settings()


def test_http_session_headers_and_timeout() -> None:
    session = build_session(HttpConfig(request_timeout_s=0, api_key="k"))
    assert session.headers["X-API-Key"] == "k"
    assert session.headers["Content-Type"] == "application/json"
    assert HttpConfig(request_timeout_s=0).request_kwargs() == {"timeout": 1}
    assert "X-API-Key" not in build_session(HttpConfig()).headers
