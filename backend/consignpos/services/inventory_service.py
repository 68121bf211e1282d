# Overview: Service-layer operations for consignment inventory; intake, restock, edits and QR labels.

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import DuplicateSKU, NotFound
from ..models import Product
from ..repositories import BrandStore, ProductStore
from ..time_utils import parse_iso_datetime
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
    validate_price_cents,
    validate_quantity,
)
from .audit_service import append_log
from .concurrency import begin_immediate, lock_for_update, run_with_retry
from .sku_service import allocate_sku
"""
Inventory Invariants (authoritative)

- Stock is a stored quantity on Product; intake and restock increase it,
  only sale finalization decreases it.
- Product intake allocates the SKU and inserts the product in one
  transaction. The unique index on sku is the final word when two
  terminals race for the same code.
- Every intake appends an "Added Inventory" activity entry in the same
  transaction.
"""


logger = logging.getLogger(__name__)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "size", "category", "cost_price_cents", "selling_price_cents"},
)


@dataclass(frozen=True)
class ProductIntake:
    """Validated input for a new consignment product."""
    brand_id: int
    name: str
    selling_price_cents: int
    stock: int
    size: str = ""
    category: str | None = None
    cost_price_cents: int = 0
    sku_mode: str = "auto"
    sku: str | None = None

    @classmethod
    def from_payload(cls, data: dict | None) -> "ProductIntake":
        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON payload")

        missing = sorted(k for k in ("brand_id", "name", "selling_price_cents") if data.get(k) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        name = str(data["name"]).strip()
        if not name:
            raise ValidationError("name cannot be blank")

        brand_id = validate_quantity(data["brand_id"], "brand_id", allow_zero=False)
        category = data.get("category")
        category = str(category).strip() or None if category is not None else None

        return cls(
            brand_id=brand_id,
            name=name,
            size=str(data.get("size") or "").strip(),
            category=category,
            cost_price_cents=validate_price_cents(data.get("cost_price_cents") or 0, "cost_price_cents"),
            selling_price_cents=validate_price_cents(data["selling_price_cents"], "selling_price_cents"),
            stock=validate_quantity(data.get("stock") or 0, "stock"),
            sku_mode=str(data.get("sku_mode") or "auto").strip().lower(),
            sku=data.get("sku"),
        )


def _new_qr_token() -> str:
    return secrets.token_urlsafe(16)


def _require_product(product_id: int) -> Product:
    product = ProductStore().get(product_id)
    if product is None:
        raise NotFound("Product not found", details={"product_id": product_id})
    return product


def list_products(
    *,
    brand_id: int | None = None,
    q: str | None = None,
    since: str | None = None,
) -> dict:
    """Products sorted by stock ascending; since= returns only rows changed after it."""
    store = ProductStore()
    if since:
        try:
            since_dt = parse_iso_datetime(since)
        except ValueError:
            raise ValidationError("since must be an ISO-8601 timestamp")
        products = store.changed_since(since_dt)
    else:
        products = store.search(brand_id=brand_id, term=q)
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_product(product_id: int) -> dict:
    return _require_product(product_id).to_dict()


def create_product(intake: ProductIntake, actor: str | None = None) -> Product:
    """Allocate a SKU and insert the product, all or nothing."""

    def _op() -> Product:
        begin_immediate()

        products = ProductStore()
        brand = BrandStore().get(intake.brand_id)
        if brand is None:
            raise NotFound("Brand not found", details={"brand_id": intake.brand_id})

        sku = allocate_sku(
            mode=intake.sku_mode,
            existing=products.all_skus(),
            brand_name=brand.name,
            product_name=intake.name,
            size=intake.size,
            manual_sku=intake.sku,
        )

        product = Product(
            brand_id=brand.id,
            sku=sku,
            qr_token=_new_qr_token(),
            name=intake.name,
            size=intake.size,
            category=intake.category,
            cost_price_cents=intake.cost_price_cents,
            selling_price_cents=intake.selling_price_cents,
            stock=intake.stock,
        )
        db.session.add(product)
        try:
            db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            raise DuplicateSKU("SKU already exists", details={"sku": sku}) from exc

        append_log(
            action="Added Inventory",
            details=f"Added {intake.stock} units of {intake.name} ({intake.size}) to {brand.name}",
            user=actor,
        )
        db.session.commit()
        return product

    product = run_with_retry(_op)
    logger.info("Product %s (%s) added with %d unit(s)", product.sku, product.name, product.stock)
    return product


def restock_product(product_id: int, quantity, actor: str | None = None) -> Product:
    qty = validate_quantity(quantity, "quantity", allow_zero=False)

    def _op() -> Product:
        begin_immediate()
        product = lock_for_update(
            db.session.query(Product).filter(Product.id == product_id).populate_existing()
        ).first()
        if product is None:
            raise NotFound("Product not found", details={"product_id": product_id})

        product.stock += qty
        db.session.flush()
        append_log(
            action="Restocked Inventory",
            details=f"Added {qty} units of {product.name} ({product.size}) to {product.brand.name}",
            user=actor,
        )
        db.session.commit()
        return product

    return run_with_retry(_op)


def update_product(product_id: int, payload: dict, actor: str | None = None) -> Product:
    """Partial edit of descriptive fields and prices. SKU, QR token and stock are fixed here."""
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)
    if "cost_price_cents" in patch and patch["cost_price_cents"] is not None:
        patch["cost_price_cents"] = validate_price_cents(patch["cost_price_cents"], "cost_price_cents")
    if not patch:
        raise ValidationError("No fields to update")

    def _op() -> Product:
        product = _require_product(product_id)
        for key, value in patch.items():
            setattr(product, key, value)
        db.session.flush()
        append_log(
            action="Updated Product",
            details=f"Updated {', '.join(sorted(patch))} for {product.sku}",
            user=actor,
        )
        db.session.commit()
        return product

    return run_with_retry(_op)


def qr_payload(product_id: int) -> dict:
    """What the label printer encodes: a link to the public scan page."""
    product = _require_product(product_id)
    base_url = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
    return {
        "product_id": product.id,
        "sku": product.sku,
        "qr_token": product.qr_token,
        "url": f"{base_url}/#/sale/{product.qr_token}",
    }


def resolve_scan_token(token: str) -> dict:
    """Public view of a product behind a QR token. Never exposes cost price."""
    product = ProductStore().find_by_qr_token((token or "").strip())
    if product is None:
        raise NotFound("Product not found", details={"qr_token": token})
    return {
        "id": product.id,
        "sku": product.sku,
        "name": product.name,
        "size": product.size,
        "brand_name": product.brand.name if product.brand else None,
        "selling_price_cents": product.selling_price_cents,
        "in_stock": product.stock > 0,
        "stock": product.stock,
    }
