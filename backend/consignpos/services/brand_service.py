# Overview: Service-layer operations for consignment brands (onboard, edit, remove).

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..errors import BrandInUse, NotFound
from ..models import Brand, Product
from ..repositories import BrandStore
from ..time_utils import parse_iso_datetime
from ..validation import ModelValidationPolicy, ValidationError, enforce_rules_brand, validate_payload
from .audit_service import append_log
from .concurrency import run_with_retry


# Store's cut when the operator leaves the rate blank
DEFAULT_COMMISSION_RATES = {
    "EXCLUSIVE": Decimal("15"),
    "NON_EXCLUSIVE": Decimal("25"),
}

BRAND_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact_email", "contact_phone", "type", "commission_rate"},
    required_on_create={"name"},
)


def default_commission_rate(brand_type: str) -> Decimal:
    return DEFAULT_COMMISSION_RATES.get(brand_type, DEFAULT_COMMISSION_RATES["EXCLUSIVE"])


def _require_brand(brand_id: int) -> Brand:
    brand = BrandStore().get(brand_id)
    if brand is None:
        raise NotFound("Brand not found", details={"brand_id": brand_id})
    return brand


def list_brands(*, since: str | None = None) -> dict:
    store = BrandStore()
    if since:
        try:
            since_dt = parse_iso_datetime(since)
        except ValueError:
            raise ValidationError("since must be an ISO-8601 timestamp")
        brands = store.changed_since(since_dt)
    else:
        brands = store.snapshot()
    return {
        "items": [b.to_dict() for b in brands],
        "count": len(brands),
    }


def get_brand(brand_id: int) -> dict:
    return _require_brand(brand_id).to_dict()


def onboard_brand(payload: dict, actor: str | None = None) -> Brand:
    patch = validate_payload(model=Brand, payload=payload, policy=BRAND_POLICY, partial=False)
    patch.setdefault("type", "EXCLUSIVE")
    enforce_rules_brand(patch)
    if patch.get("commission_rate") is None:
        patch["commission_rate"] = default_commission_rate(patch["type"])

    def _op() -> Brand:
        brand = Brand(**patch)
        db.session.add(brand)
        db.session.flush()
        append_log(action="Onboarded Brand", details=f"Added new brand: {brand.name}", user=actor)
        db.session.commit()
        return brand

    return run_with_retry(_op)


def update_brand(brand_id: int, payload: dict, actor: str | None = None) -> Brand:
    """
    Partial update. A new rate applies to lines priced from now on; sale
    lines already recorded keep the rate they were sold at.
    """
    patch = validate_payload(model=Brand, payload=payload, policy=BRAND_POLICY, partial=True)
    enforce_rules_brand(patch)
    if "commission_rate" in patch and patch["commission_rate"] is None:
        raise ValidationError("commission_rate cannot be null")
    if not patch:
        raise ValidationError("No fields to update")

    def _op() -> Brand:
        brand = _require_brand(brand_id)
        for key, value in patch.items():
            setattr(brand, key, value)
        db.session.flush()
        append_log(action="Updated Brand", details=f"Updated details for brand: {brand.name}", user=actor)
        db.session.commit()
        return brand

    return run_with_retry(_op)


def delete_brand(brand_id: int, actor: str | None = None) -> None:
    """Remove a brand with no products. Its past sale lines stay untouched."""

    def _op() -> None:
        brand = _require_brand(brand_id)
        product_count = db.session.query(Product.id).filter(Product.brand_id == brand.id).count()
        if product_count:
            raise BrandInUse(
                "Brand still has products; remove or reassign them first",
                details={"brand_id": brand.id, "product_count": product_count},
            )
        name = brand.name
        db.session.delete(brand)
        db.session.flush()
        append_log(action="Deleted Brand", details=f"Deleted brand: {name} (ID: {brand_id})", user=actor)
        db.session.commit()

    run_with_retry(_op)
