"""Conversions between human-entered decimal amounts and token base units.

All arithmetic is exact: input text is parsed with :class:`decimal.Decimal`
and scaled with integer operations, so no quantity ever passes through a
binary float. Excess fractional digits are truncated, never rounded up.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from bondflow.domain.errors import InvalidAmount

AmountInput = Union[str, int, Decimal]

# Ledger quantities are uint256.
MAX_BASE_UNITS = 2 ** 256 - 1
_MAX_DIGITS = len(str(MAX_BASE_UNITS))


def to_base_units(amount: AmountInput, precision: int) -> int:
    """Convert a non-negative decimal amount into integer base units.

    Args:
        amount: Decimal text such as ``"100.00"``; ``int`` and ``Decimal`` are
            accepted as well. Floats are rejected.
        precision: Token decimal precision.

    Returns:
        int: ``amount * 10**precision`` truncated toward zero.

    Raises:
        InvalidAmount: When the amount does not parse as a finite, non-negative
            number, ``precision`` is negative, or the result does not fit a
            uint256.
    """
    _require_precision(precision)
    value = _parse_decimal(amount)
    _, digits, exponent = value.as_tuple()
    significant = "".join(str(d) for d in digits).lstrip("0")
    if not significant:
        return 0
    shift = int(exponent) + precision
    if shift >= 0:
        if len(significant) + shift > _MAX_DIGITS:
            raise InvalidAmount("Amount is too large.")
        raw = int(significant) * (10 ** shift)
    else:
        # Digits below one base unit are dropped.
        kept = significant[: max(0, len(significant) + shift)]
        if not kept:
            return 0
        if len(kept) > _MAX_DIGITS:
            raise InvalidAmount("Amount is too large.")
        raw = int(kept)
    if raw > MAX_BASE_UNITS:
        raise InvalidAmount("Amount is too large.")
    return raw


def to_positive_base_units(amount: AmountInput, precision: int) -> int:
    """Like :func:`to_base_units` but rejects amounts that convert to zero."""
    raw = to_base_units(amount, precision)
    if raw <= 0:
        raise InvalidAmount()
    return raw


def from_base_units(
    raw: int,
    precision: int,
    display_precision: int = 4,
    *,
    min_fraction_digits: int = 0,
) -> str:
    """Render integer base units as decimal text.

    The fractional part is truncated to ``display_precision`` digits. A zero
    fraction renders as the bare integer unless ``min_fraction_digits`` asks
    for padding (coupon amounts use two).
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise TypeError("from_base_units expects an integer quantity.")
    _require_precision(precision)
    if display_precision < 0 or min_fraction_digits < 0:
        raise ValueError("Display precision must not be negative.")

    sign = "-" if raw < 0 else ""
    integer_part, fractional_part = divmod(abs(raw), 10 ** precision)
    if fractional_part == 0:
        if min_fraction_digits:
            return f"{sign}{integer_part}.{'0' * min_fraction_digits}"
        return f"{sign}{integer_part}"

    fraction = str(fractional_part).rjust(precision, "0")[:display_precision]
    fraction = fraction.ljust(min_fraction_digits, "0")
    if not fraction:
        return f"{sign}{integer_part}"
    return f"{sign}{integer_part}.{fraction}"


def parse_decimal(amount: AmountInput) -> Decimal:
    """Parse user input into a finite, non-negative ``Decimal``."""
    return _parse_decimal(amount)


def _parse_decimal(amount: AmountInput) -> Decimal:
    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmount()
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, str):
        text = amount.strip()
        if not text:
            raise InvalidAmount()
        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidAmount() from exc
    else:
        raise InvalidAmount()

    if not value.is_finite() or (value.is_signed() and value != 0):
        raise InvalidAmount()
    return value


def _require_precision(precision: int) -> None:
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
        raise InvalidAmount("Token precision must be a non-negative integer.")


__all__ = [
    "AmountInput",
    "MAX_BASE_UNITS",
    "from_base_units",
    "parse_decimal",
    "to_base_units",
    "to_positive_base_units",
]
