from __future__ import annotations

from decimal import Decimal


_TWO_PLACES = Decimal("0.01")


def cents_to_decimal(cents: int) -> Decimal:
    """Integer cents as a two-place Decimal (1250 -> Decimal("12.50"))."""
    return (Decimal(int(cents)) / 100).quantize(_TWO_PLACES)


def format_cents(cents: int) -> str:
    """Fixed two-decimal rendering of an integer cent amount ("1234" -> "12.34")."""
    cents = int(cents)
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"
