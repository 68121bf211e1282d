# Overview: Inventory SKU allocation (auto-generated or operator supplied).

"""
SKU Allocator

Auto SKUs look like "NO-LINEN-M-417": two brand letters, five product-name
letters, the size and a random number. Collisions are retried against the
current set of SKUs; the unique constraint on products.sku is the final
guard when two terminals race.
"""

from __future__ import annotations

import random
import re
from typing import Callable, Container

from ..errors import DuplicateSKU
from ..validation import ValidationError


SKU_MODES = ("auto", "manual")
MAX_AUTO_ATTEMPTS = 50

_WHITESPACE = re.compile(r"\s+")


def _squash(value: str | None) -> str:
    return _WHITESPACE.sub("", value or "")


def generate_sku(brand_name: str | None, product_name: str, size: str | None, rng: Callable[[], int] | None = None) -> str:
    """One candidate SKU. rng returns an integer in 0..999."""
    brand_part = (brand_name or "")[:2].upper() or "XX"
    name_part = _squash((product_name or "")[:5]).upper()
    size_part = _squash(size)
    number = rng() if rng is not None else random.randint(0, 999)
    return f"{brand_part}-{name_part}-{size_part}-{number}"


def normalize_manual_sku(value) -> str:
    sku = str(value or "").strip()
    if not sku:
        raise ValidationError("sku is required when sku_mode is manual", details={"field": "sku"})
    return sku


def allocate_sku(
    *,
    mode: str,
    existing: Container[str],
    brand_name: str | None = None,
    product_name: str = "",
    size: str | None = None,
    manual_sku: str | None = None,
    rng: Callable[[], int] | None = None,
    max_attempts: int = MAX_AUTO_ATTEMPTS,
) -> str:
    """
    Return a SKU not present in existing.

    Raises ValidationError for an unknown mode or a blank manual code and
    DuplicateSKU when the code is taken (manual) or no free code turned up
    within max_attempts (auto).
    """
    mode = (mode or "auto").strip().lower()
    if mode not in SKU_MODES:
        raise ValidationError(f"sku_mode must be one of {', '.join(SKU_MODES)}", details={"field": "sku_mode"})

    if mode == "manual":
        sku = normalize_manual_sku(manual_sku)
        if sku in existing:
            raise DuplicateSKU("SKU already exists", details={"sku": sku})
        return sku

    for _ in range(max_attempts):
        candidate = generate_sku(brand_name, product_name, size, rng)
        if candidate not in existing:
            return candidate

    raise DuplicateSKU(
        "Could not generate a unique SKU",
        details={"attempts": max_attempts, "product_name": product_name},
    )
