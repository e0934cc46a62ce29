from __future__ import annotations

from typing import Optional


def format_address(address: Optional[str]) -> str:
    """
    Shorten a hex address for display.

    Returns ``0x1234...abcd`` for full addresses and the input unchanged when
    it is too short to abbreviate.
    """
    if not isinstance(address, str):
        return ""
    text = address.strip()
    if len(text) <= 10:
        return text
    return f"{text[:6]}...{text[-4:]}"


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    """Compare two hex addresses case-insensitively."""
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


__all__ = ["format_address", "same_address"]
