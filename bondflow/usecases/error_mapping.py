"""Translate ledger errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from bondflow.domain.errors import LedgerError, RemoteSendError
from bondflow.domain.ports import UseCaseError

SUBSCRIBE_REVERT_HINT = (
    "Transaction reverted. Check: 1) Price > 0, 2) Sufficient balance, "
    "3) Proper allowance, 4) Issuer has enough AAPL50"
)
REDEEM_REVERT_HINT = (
    "Transaction reverted. Check: 1) Sufficient AAPL50 balance, "
    "2) Proper allowance, 3) Issuer has enough USDt"
)
GAS_FUNDS_MESSAGE = "Insufficient ETH for gas fees."


def map_ledger_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
    revert_hint: Optional[str] = None,
) -> UseCaseError:
    """Map gateway exceptions to stable UseCaseError codes.

    Args:
        exc (Exception): Failure raised by a port or use case.
        default_code (str): Code used for unexpected exception types.
        default_message (Optional[str]): Message used when ``exc`` has none.
        revert_hint (Optional[str]): Checklist shown instead of a raw revert
            message for value-moving transactions.

    Returns:
        UseCaseError: ``exc`` itself when already mapped, else a new error.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, LedgerError):
        text = (exc.message or "").strip()
        lower = text.lower()
        if revert_hint and "revert" in lower:
            return UseCaseError("TX_REVERTED", revert_hint)
        if "insufficient funds" in lower:
            return UseCaseError("INSUFFICIENT_GAS", GAS_FUNDS_MESSAGE)
        code = "REMOTE_SEND_FAILED" if isinstance(exc, RemoteSendError) else "REMOTE_READ_FAILED"
        return UseCaseError(code, text or default_message or "Ledger request failed.")

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


__all__ = [
    "GAS_FUNDS_MESSAGE",
    "REDEEM_REVERT_HINT",
    "SUBSCRIBE_REVERT_HINT",
    "map_ledger_error",
]
