"""Domain-level error types for use-case and adapter mapping.

Ledger failures (``RemoteReadError``/``RemoteSendError``) are raised by
adapters and carry the failing contract and method without leaking
transport-specific exception types. The ``UseCaseError`` subclasses are
local validation and precondition failures that never reach the network.
"""

from __future__ import annotations

from typing import Optional

from bondflow.domain.ports import UseCaseError


class LedgerError(RuntimeError):
    """Base class for ledger gateway failures."""

    def __init__(
        self,
        message: str,
        *,
        contract: Optional[str] = None,
        method: Optional[str] = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.contract = contract
        self.method = method
        self.context = context


class RemoteReadError(LedgerError):
    """A read-only contract call failed."""


class RemoteSendError(LedgerError):
    """A state-changing transaction was not accepted by the ledger."""


class InvalidAmount(UseCaseError):
    def __init__(self, message: str = "Please enter a valid amount.") -> None:
        super().__init__("INVALID_AMOUNT", message)


class InsufficientBalance(UseCaseError):
    def __init__(self, symbol: str, *, required: int, available: int) -> None:
        super().__init__("INSUFFICIENT_BALANCE", f"Insufficient {symbol} balance.")
        self.symbol = symbol
        self.required = required
        self.available = available


class InsufficientAllowance(UseCaseError):
    def __init__(self, symbol: str, *, required: int, available: int) -> None:
        super().__init__(
            "INSUFFICIENT_ALLOWANCE",
            f"Insufficient {symbol} allowance. Please approve first.",
        )
        self.symbol = symbol
        self.required = required
        self.available = available


class WrongNetwork(UseCaseError):
    def __init__(self, *, expected: int, actual: int) -> None:
        super().__init__(
            "WRONG_NETWORK",
            f"Wrong network (chain {actual}). Please switch to chain {expected}.",
        )
        self.expected = expected
        self.actual = actual


class NotConnected(UseCaseError):
    def __init__(self) -> None:
        super().__init__("NOT_CONNECTED", "Please connect wallet first.")


class Busy(UseCaseError):
    def __init__(self) -> None:
        super().__init__("BUSY", "Another operation is still in progress.")


class NonFatalCouponFailure(UseCaseError):
    """Coupon step failure that is recorded but never aborts a flow."""

    def __init__(self, message: str) -> None:
        super().__init__("COUPON_NON_FATAL", message)


__all__ = [
    "Busy",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidAmount",
    "LedgerError",
    "NonFatalCouponFailure",
    "NotConnected",
    "RemoteReadError",
    "RemoteSendError",
    "WrongNetwork",
]
