from decimal import Decimal

import pytest

from consignpos.errors import InsufficientStock, NotFound, OutOfStock
from consignpos.repositories import BrandStore, ProductStore
from consignpos.services.cart_service import Cart, CartRegistry
from consignpos.services.commission_service import split_commission
from consignpos.validation import ValidationError


@pytest.fixture
def cart(db_session):
    return Cart(ProductStore(), BrandStore())


def test_add_by_sku_creates_line_with_split(cart, product):
    line = cart.add("NO-TEE-M-1")

    assert line.quantity == 1
    assert line.unit_price_cents == 10000
    assert line.commission_cents == 1000
    assert line.brand_revenue_cents == 9000
    assert line.brand_name == "Northwind"


def test_add_resolves_qr_token_and_id(cart, product):
    cart.add("qr-tee-m")
    cart.add(str(product.id))

    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2


def test_same_product_twice_is_one_line_recomputed(cart, product):
    cart.add(product.sku)
    line = cart.add(product.sku)

    expected = split_commission(10000, 2, Decimal("10"))
    assert len(cart.lines) == 1
    assert line.quantity == 2
    assert line.commission_cents == expected.commission_cents
    assert line.brand_revenue_cents == expected.brand_revenue_cents


def test_unknown_identifier_is_not_found(cart, product):
    with pytest.raises(NotFound):
        cart.add("NOPE-123")
    assert cart.is_empty()


def test_out_of_stock_when_all_units_in_cart(cart, product):
    for _ in range(5):
        cart.add(product.sku)

    with pytest.raises(OutOfStock):
        cart.add(product.sku)
    assert cart.line(product.id).quantity == 5


def test_zero_stock_product_cannot_be_added(cart, product, db_session):
    product.stock = 0
    db_session.commit()

    with pytest.raises(OutOfStock):
        cart.add(product.sku)
    assert cart.is_empty()


def test_decrement_to_zero_removes_line(cart, product, product_b):
    cart.add(product.sku)
    cart.add(product_b.sku)

    assert cart.adjust_quantity(product.id, -1) is None
    assert [l.product_id for l in cart.lines] == [product_b.id]

    cart.remove(product_b.id)
    assert cart.is_empty()
    assert cart.totals()["total_amount_cents"] == 0


def test_increment_past_stock_is_refused(cart, product_b):
    cart.add(product_b.sku)

    with pytest.raises(InsufficientStock):
        cart.adjust_quantity(product_b.id, 3)
    assert cart.line(product_b.id).quantity == 1

    line = cart.adjust_quantity(product_b.id, 2)
    assert line.quantity == 3
    assert line.commission_cents == 3000


def test_price_override_recomputes_from_new_price(cart, product):
    cart.add(product.sku)
    cart.add(product.sku)

    line = cart.override_price(product.id, 8000)

    assert line.list_price_cents == 10000
    assert line.unit_price_cents == 8000
    assert line.commission_cents == 1600
    assert line.brand_revenue_cents == 14400
    assert line.to_dict()["is_price_override"] is True


def test_price_override_rejects_negative(cart, product):
    cart.add(product.sku)
    with pytest.raises(ValidationError):
        cart.override_price(product.id, -100)


def test_rate_change_applies_on_next_recompute(cart, product, brand, db_session):
    cart.add(product.sku)
    brand.commission_rate = Decimal("20")
    db_session.commit()

    line = cart.add(product.sku)

    assert line.commission_rate == Decimal("20")
    assert line.commission_cents == 4000


def test_totals_sum_lines(cart, product, product_b):
    cart.add(product.sku)
    cart.add(product.sku)
    cart.add(product_b.sku)

    totals = cart.totals()
    assert totals == {
        "total_amount_cents": 25000,
        "total_commission_cents": 3000,
        "total_brand_revenue_cents": 22000,
        "item_count": 3,
    }


def test_registry_open_get_discard(db_session):
    registry = CartRegistry()
    cart = registry.open()

    assert registry.get(cart.id) is cart
    assert len(registry) == 1
    assert registry.discard(cart.id) is True
    assert registry.discard(cart.id) is False
    with pytest.raises(NotFound):
        registry.get(cart.id)
