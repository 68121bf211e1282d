from decimal import Decimal

import pytest

from consignpos.errors import BrandInUse, DuplicateSKU, NotFound
from consignpos.models import AuditLog, Brand, Product
from consignpos.services import brand_service, inventory_service, settings_service
from consignpos.services.inventory_service import ProductIntake
from consignpos.validation import ValidationError


def _intake(brand_id=1, **overrides):
    data = {
        "brand_id": brand_id,
        "name": "Linen Shirt",
        "size": "M",
        "category": "Tops",
        "cost_price_cents": 1200,
        "selling_price_cents": 2500,
        "stock": 10,
    }
    data.update(overrides)
    return ProductIntake.from_payload(data)


def test_create_product_allocates_auto_sku(db_session, brand):
    product = inventory_service.create_product(_intake(brand.id), actor="Dana")

    assert product.sku.startswith("NO-LINEN-M-")
    assert product.qr_token
    assert product.stock == 10

    entry = db_session.query(AuditLog).filter_by(action="Added Inventory").one()
    assert entry.details == "Added 10 units of Linen Shirt (M) to Northwind"
    assert entry.user == "Dana"


def test_create_product_manual_sku(db_session, brand, product):
    created = inventory_service.create_product(_intake(brand.id, sku_mode="manual", sku=" NW-001 "))
    assert created.sku == "NW-001"

    with pytest.raises(DuplicateSKU):
        inventory_service.create_product(_intake(brand.id, sku_mode="manual", sku=product.sku))
    assert db_session.query(Product).count() == 2


def test_create_product_unknown_brand(db_session):
    with pytest.raises(NotFound):
        inventory_service.create_product(_intake(42))
    assert db_session.query(AuditLog).count() == 0


@pytest.mark.parametrize("overrides", [
    {"name": "  "},
    {"selling_price_cents": -1},
    {"selling_price_cents": "12.50"},
    {"stock": -3},
    {"brand_id": None},
])
def test_intake_validation(overrides):
    with pytest.raises(ValidationError):
        _intake(**overrides)


def test_restock_and_update(db_session, product):
    inventory_service.restock_product(product.id, 4, actor="Dana")
    updated = inventory_service.update_product(product.id, {"selling_price_cents": 12000}, actor="Dana")

    assert updated.stock == 9
    assert updated.selling_price_cents == 12000
    actions = [e.action for e in db_session.query(AuditLog).order_by(AuditLog.id).all()]
    assert actions == ["Restocked Inventory", "Updated Product"]

    with pytest.raises(ValidationError):
        inventory_service.restock_product(product.id, 0)
    with pytest.raises(ValidationError):
        inventory_service.update_product(product.id, {"sku": "NEW"})


def test_update_product_cannot_overwrite_stock(db_session, product):
    with pytest.raises(ValidationError):
        inventory_service.update_product(product.id, {"stock": 0, "name": "Tee"})

    db_session.expire_all()
    assert db_session.get(Product, product.id).stock == 5
    assert db_session.query(AuditLog).count() == 0


def test_list_products_sorted_by_stock(db_session, product, product_b):
    listing = inventory_service.list_products()
    assert [p["sku"] for p in listing["items"]] == [product_b.sku, product.sku]

    only_brand = inventory_service.list_products(brand_id=product.brand_id)
    assert [p["id"] for p in only_brand["items"]] == [product.id]

    assert inventory_service.list_products(q="belt")["count"] == 1


def test_qr_payload_and_scan(db_session, product):
    payload = inventory_service.qr_payload(product.id)
    assert payload["url"] == "https://shop.example.com/#/sale/qr-tee-m"

    scanned = inventory_service.resolve_scan_token("qr-tee-m")
    assert scanned["sku"] == product.sku
    assert scanned["brand_name"] == "Northwind"
    assert "cost_price_cents" not in scanned

    with pytest.raises(NotFound):
        inventory_service.resolve_scan_token("missing")


def test_onboard_brand_defaults_rate_by_type(db_session):
    exclusive = brand_service.onboard_brand({"name": "Urban Threadz"}, actor="Dana")
    non_exclusive = brand_service.onboard_brand({"name": "Luxe", "type": "non-exclusive"})
    custom = brand_service.onboard_brand({"name": "EcoWear", "type": "EXCLUSIVE", "commission_rate": "12"})

    assert exclusive.commission_rate == Decimal("15")
    assert non_exclusive.type == "NON_EXCLUSIVE"
    assert non_exclusive.commission_rate == Decimal("25")
    assert custom.commission_rate == Decimal("12")

    entry = db_session.query(AuditLog).filter_by(user="Dana").one()
    assert entry.action == "Onboarded Brand"
    assert entry.details == "Added new brand: Urban Threadz"


@pytest.mark.parametrize("payload", [
    {},
    {"name": "X", "commission_rate": 101},
    {"name": "X", "type": "FRANCHISE"},
    {"name": "X", "owner": "me"},
])
def test_onboard_brand_rejects_bad_payload(db_session, payload):
    with pytest.raises(ValidationError):
        brand_service.onboard_brand(payload)


def test_update_brand(db_session, brand):
    updated = brand_service.update_brand(brand.id, {"commission_rate": 30, "contact_phone": "555-0199"})
    assert updated.commission_rate == Decimal("30")
    assert updated.contact_phone == "555-0199"

    with pytest.raises(NotFound):
        brand_service.update_brand(999, {"name": "Ghost"})


def test_delete_brand_with_products_is_refused(db_session, brand, product):
    with pytest.raises(BrandInUse):
        brand_service.delete_brand(brand.id)
    assert db_session.get(Brand, brand.id) is not None


def test_delete_brand(db_session, brand_b):
    brand_id = brand_b.id
    brand_service.delete_brand(brand_id, actor="Dana")

    assert db_session.get(Brand, brand_id) is None
    entry = db_session.query(AuditLog).filter_by(action="Deleted Brand").one()
    assert entry.details == f"Deleted brand: Luxe Leather (ID: {brand_id})"


def test_store_profile_get_or_default_and_replace(db_session):
    assert settings_service.get_store_profile()["updated_at"] is None

    saved = settings_service.replace_store_profile(
        {"name": "Street Shop", "address": "M-84 Market", "phone": "555", "email": "a@b.c", "tax_id": "GST1"},
        actor="Dana",
    )
    assert saved["name"] == "Street Shop"

    replaced = settings_service.replace_store_profile({"name": "Street Shop"})
    assert replaced["address"] == ""
    assert db_session.query(AuditLog).filter_by(action="Updated Store Settings").count() == 2

    with pytest.raises(ValidationError):
        settings_service.replace_store_profile({"name": ""})
