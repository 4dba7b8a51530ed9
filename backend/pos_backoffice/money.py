# Overview: Conversions between integer cents and decimal money representations.

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

_CENT = Decimal("0.01")


def to_cents(value: Any) -> int:
    """
    Convert a decimal money value ("10.00", 10.5, Decimal) to integer cents.

    Rounds half-up to the nearest cent. Raises ValueError for anything that
    is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError("money value must be a number")
    if isinstance(value, int):
        return value * 100
    text = str(value).strip().replace("$", "").replace(",", "")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid money value: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Render cents as a two-decimal string, e.g. 2000 -> "20.00"."""
    return str((Decimal(cents) / 100).quantize(_CENT))
