import itertools

import pytest

from consignpos.errors import DuplicateSKU
from consignpos.services.sku_service import allocate_sku, generate_sku
from consignpos.validation import ValidationError


def test_generate_sku_format():
    assert generate_sku("Northwind", "Linen Shirt", "M", rng=lambda: 417) == "NO-LINEN-M-417"
    assert generate_sku("Northwind", "Tee", "X L", rng=lambda: 0) == "NO-TEE-XL-0"


def test_generate_sku_without_brand_uses_placeholder():
    assert generate_sku("", "Cap", "", rng=lambda: 5) == "XX-CAP--5"
    assert generate_sku(None, "Cap", None, rng=lambda: 5) == "XX-CAP--5"


def test_generate_sku_random_suffix_in_range():
    for _ in range(50):
        suffix = int(generate_sku("Ab", "Hat", "S").rsplit("-", 1)[1])
        assert 0 <= suffix <= 999


def test_auto_retries_past_collision():
    numbers = iter([7, 7, 8])
    sku = allocate_sku(
        mode="auto",
        existing={"NO-TEE-M-7"},
        brand_name="Northwind",
        product_name="Tee",
        size="M",
        rng=lambda: next(numbers),
    )
    assert sku == "NO-TEE-M-8"


def test_auto_gives_up_after_max_attempts():
    taken = {f"NO-TEE-M-{n}" for n in range(3)}
    numbers = itertools.cycle([0, 1, 2])
    with pytest.raises(DuplicateSKU):
        allocate_sku(
            mode="auto",
            existing=taken,
            brand_name="Northwind",
            product_name="Tee",
            size="M",
            rng=lambda: next(numbers),
            max_attempts=10,
        )


def test_manual_sku_is_trimmed():
    assert allocate_sku(mode="manual", existing=set(), manual_sku="  CUSTOM-1 ") == "CUSTOM-1"


def test_manual_blank_is_rejected():
    with pytest.raises(ValidationError):
        allocate_sku(mode="manual", existing=set(), manual_sku="   ")


def test_manual_duplicate_is_rejected():
    with pytest.raises(DuplicateSKU):
        allocate_sku(mode="manual", existing={"CUSTOM-1"}, manual_sku="CUSTOM-1")


def test_unknown_mode_is_rejected():
    with pytest.raises(ValidationError):
        allocate_sku(mode="sequence", existing=set(), product_name="Tee")
