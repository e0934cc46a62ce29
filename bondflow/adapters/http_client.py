"""Shared HTTP transport utilities for the JSON-RPC ledger adapter.

This module provides a thin wrapper around ``requests.Session`` so the RPC
provider shares one timeout policy and API-key header construction.

Dependencies:
    - ``requests`` for network I/O.

Call context:
    - Constructed by ``bondflow/adapters/ledger_web3.py`` when it builds its
      ``HTTPProvider``.
    - Used only inside the adapter layer; use cases interact through ports.

The session never retries: retry policy belongs to the callers of the
ledger port, and a resent transaction could move value twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import requests


@dataclass
class HttpConfig:
    """Timeout and credential configuration for RPC calls.

    Attributes:
        request_timeout_s: Timeout in seconds for each JSON-RPC request.
        api_key: Optional provider key sent as ``X-API-Key``.
    """
    request_timeout_s: int = 30
    api_key: Optional[str] = None

    def request_kwargs(self) -> Dict[str, int]:
        """Return keyword arguments forwarded to every ``session.post`` call."""
        return {"timeout": max(1, int(self.request_timeout_s))}


def build_session(cfg: HttpConfig) -> requests.Session:
    """Create a ``requests.Session`` with JSON headers for RPC traffic.

    Args:
        cfg: Shared timeout and credential settings.

    Returns:
        A persistent session; the caller owns and closes it.
    """
    session = requests.Session()
    session.headers.update(_headers(cfg.api_key))
    return session


def _headers(api_key: Optional[str]) -> Dict[str, str]:
    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if api_key:
        headers["X-API-Key"] = api_key
    return headers


__all__ = ["HttpConfig", "build_session"]
