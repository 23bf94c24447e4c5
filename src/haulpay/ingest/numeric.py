"""Fail-soft numeric coercion for provider cells."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")


def parse_decimal(text: str | None) -> Decimal:
    """Parse ``text`` as a decimal number, returning 0 when it is not one.

    Blank, non-numeric ("N/A", "1,234.50", "$12") and non-finite ("NaN",
    "Infinity") values all become 0 without raising.
    """
    if text is None:
        return ZERO
    candidate = text.strip()
    if not candidate:
        return ZERO
    try:
        value = Decimal(candidate)
    except (InvalidOperation, ValueError):
        return ZERO
    if not value.is_finite():
        return ZERO
    return value
