from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bondflow.domain.entities import Session
from bondflow.domain.errors import NotConnected, WrongNetwork


@dataclass
class EnsureSession:
    """Reject missing sessions and sessions on the wrong network."""

    chain_id: int

    def __call__(self, session: Optional[Session]) -> Session:
        if session is None:
            raise NotConnected()
        if session.chain_id != self.chain_id:
            raise WrongNetwork(expected=self.chain_id, actual=session.chain_id)
        return session


__all__ = ["EnsureSession"]
