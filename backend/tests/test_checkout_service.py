from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from consignpos.errors import EmptyCart, InsufficientStock, MissingCustomerPhone, PersistenceFailure
from consignpos.models import AuditLog, Product, Sale
from consignpos.repositories import BrandStore, ProductStore
from consignpos.services import checkout_service
from consignpos.services.cart_service import Cart, CartLine
from consignpos.services.checkout_service import CustomerInfo, finalize_cart, finalize_sale


CUSTOMER = CustomerInfo(phone="555-0100", name="Ada", address="1 Main St")


@pytest.fixture
def cart(db_session):
    return Cart(ProductStore(), BrandStore())


def test_finalize_totals_and_stock(cart, product, product_b, db_session):
    cart.add(product.sku)
    cart.add(product.sku)
    cart.add(product_b.sku)

    sale = finalize_cart(cart, CUSTOMER, actor="Dana")

    assert sale.total_amount_cents == 25000
    assert sale.total_commission_cents == 3000
    assert sale.total_brand_revenue_cents == 22000
    assert sale.item_count == 3
    assert sale.customer_phone == "555-0100"
    assert sale.recorded_by == "Dana"
    assert [l.quantity for l in sale.lines] == [2, 1]

    db_session.expire_all()
    assert db_session.get(Product, product.id).stock == 3
    assert db_session.get(Product, product_b.id).stock == 2
    assert cart.is_empty()


def test_finalize_writes_activity_entry(cart, product, db_session):
    cart.add(product.sku)
    sale = finalize_cart(cart, CUSTOMER, actor="Dana")

    entry = db_session.query(AuditLog).filter_by(action="Recorded Sale").one()
    assert entry.user == "Dana"
    assert entry.details == f"Sale ID: {sale.document_number} | Amount: 100.00 | Items: 1"


def test_sale_lines_keep_snapshot_after_edits(cart, product, brand, db_session):
    cart.add(product.sku)
    sale = finalize_cart(cart, CUSTOMER)

    brand.name = "Renamed"
    brand.commission_rate = Decimal("50")
    product.name = "Renamed Tee"
    db_session.commit()

    db_session.expire_all()
    line = db_session.get(Sale, sale.id).lines[0]
    assert line.brand_name == "Northwind"
    assert line.product_name == "Tee"
    assert line.commission_rate == Decimal("10")
    assert line.commission_cents == 1000


def test_document_numbers_increase(cart, product):
    cart.add(product.sku)
    first = finalize_cart(cart, CUSTOMER)
    cart.add(product.sku)
    second = finalize_cart(cart, CUSTOMER)

    first_no = int(first.document_number.removeprefix("S-"))
    second_no = int(second.document_number.removeprefix("S-"))
    assert first.document_number == f"S-{first_no:06d}"
    assert second_no > first_no


def test_empty_cart_is_refused(cart, db_session):
    with pytest.raises(EmptyCart):
        finalize_cart(cart, CUSTOMER)
    assert db_session.query(Sale).count() == 0


def test_blank_phone_is_refused(cart, product, db_session):
    cart.add(product.sku)

    with pytest.raises(MissingCustomerPhone):
        finalize_cart(cart, CustomerInfo(phone="   ", name="Ada"))

    assert db_session.query(Sale).count() == 0
    assert len(cart.lines) == 1


def test_customer_info_from_payload_trims():
    info = CustomerInfo.from_payload({"phone": " 555 ", "name": "", "address": None})
    assert info == CustomerInfo(phone="555", name=None, address=None)


def _line_for(product, brand, quantity):
    line = CartLine(
        product_id=product.id,
        brand_id=brand.id,
        brand_name=brand.name,
        product_name=product.name,
        sku=product.sku,
        size=product.size,
        commission_rate=Decimal(brand.commission_rate),
        list_price_cents=product.selling_price_cents,
        unit_price_cents=product.selling_price_cents,
        quantity=quantity,
    )
    line.recompute()
    return line


def test_oversized_sale_fails_before_any_write(product, product_b, brand, brand_b, db_session):
    ok_line = _line_for(product, brand, 1)
    too_many = _line_for(product_b, brand_b, 4)

    with pytest.raises(InsufficientStock) as exc:
        finalize_sale([ok_line, too_many], CUSTOMER)

    assert exc.value.details["items"][0]["product_id"] == product_b.id
    db_session.expire_all()
    assert db_session.query(Sale).count() == 0
    assert db_session.query(AuditLog).count() == 0
    assert db_session.get(Product, product.id).stock == 5
    assert db_session.get(Product, product_b.id).stock == 3


def test_second_sale_of_last_units_fails(cart, product_b, db_session):
    # Two terminals each hold all three units; only the first one succeeds
    other = Cart(ProductStore(), BrandStore())
    for _ in range(3):
        cart.add(product_b.sku)
        other.add(product_b.sku)

    finalize_cart(cart, CUSTOMER)

    with pytest.raises(InsufficientStock):
        finalize_cart(other, CUSTOMER)

    assert len(other.lines) == 1
    db_session.expire_all()
    assert db_session.get(Product, product_b.id).stock == 0
    assert db_session.query(Sale).count() == 1


def test_database_failure_leaves_store_and_cart_untouched(cart, product, db_session, monkeypatch):
    cart.add(product.sku)
    cart.add(product.sku)

    def locked(**kwargs):
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("database is locked"))

    monkeypatch.setattr(checkout_service, "append_log", locked)
    with pytest.raises(PersistenceFailure):
        finalize_cart(cart, CUSTOMER, actor="Dana")

    db_session.expire_all()
    assert db_session.query(Sale).count() == 0
    assert db_session.query(AuditLog).count() == 0
    assert db_session.get(Product, product.id).stock == 5
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
