# Overview: Commission split between store and brand for a single sale line.

"""
Commission Calculator

A line's total (unit price x quantity) is divided into:
- commission: the store's cut, unit_price * rate / 100 * quantity
- brand revenue: whatever remains of the line total

INVARIANT: commission_cents + brand_revenue_cents == unit_price_cents * quantity,
exactly. Brand revenue is always derived as the complement of the rounded
commission, never computed on its own, so no rounding drift can appear.

Callers recompute the whole line whenever price, quantity or rate changes;
there is no incremental "add one more unit" path.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from ..validation import ValidationError, validate_commission_rate


_HUNDRED = Decimal(100)
_ONE_CENT = Decimal(1)


@dataclass(frozen=True)
class CommissionSplit:
    commission_cents: int
    brand_revenue_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.commission_cents + self.brand_revenue_cents


def split_commission(unit_price_cents: int, quantity: int, commission_rate) -> CommissionSplit:
    """
    Split unit_price_cents * quantity by a percentage commission rate.

    commission_rate may be an int, Decimal or numeric string in [0, 100].
    The commission is rounded half-up to whole cents once for the line.
    """
    if isinstance(unit_price_cents, bool) or not isinstance(unit_price_cents, int):
        raise ValidationError("unit_price_cents must be an integer")
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if unit_price_cents < 0:
        raise ValidationError("unit_price_cents must be >= 0")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")

    rate = validate_commission_rate(commission_rate)

    line_total = unit_price_cents * quantity
    raw = Decimal(unit_price_cents) * rate / _HUNDRED * quantity
    commission = int(raw.quantize(_ONE_CENT, rounding=ROUND_HALF_UP))

    return CommissionSplit(
        commission_cents=commission,
        brand_revenue_cents=line_total - commission,
    )
