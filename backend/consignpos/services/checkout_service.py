# Overview: Sale finalization; turns a cart into an immutable sale in one transaction.

"""
Sale Finalizer

WHY one transaction: the sale insert, every stock decrement and the activity
log entry must land together or not at all. Two terminals selling the last
unit of a product are serialized by the write lock, and the second one fails
the stock check before anything is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func

from ..extensions import db
from ..errors import EmptyCart, InsufficientStock, MissingCustomerPhone, NotFound
from ..models import Product, Sale, SaleLine
from ..money import format_cents
from ..validation import ValidationError
from .audit_service import append_log
from .cart_service import Cart, CartLine
from .concurrency import begin_immediate, lock_for_update, run_with_retry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerInfo:
    phone: str
    name: str | None = None
    address: str | None = None

    @classmethod
    def from_payload(cls, data: dict | None) -> "CustomerInfo":
        data = data or {}
        if not isinstance(data, dict):
            raise ValidationError("customer must be an object")

        def _clean(key: str) -> str | None:
            value = data.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        return cls(
            phone=_clean("phone") or "",
            name=_clean("name"),
            address=_clean("address"),
        )


def _next_document_number() -> str:
    # Runs under the write lock taken by begin_immediate()/FOR UPDATE
    last_id = db.session.query(func.max(Sale.id)).scalar() or 0
    return f"S-{last_id + 1:06d}"


def _validate_on_hand(lines: list[CartLine], products: dict[int, Product]) -> None:
    product_totals: dict[int, int] = {}
    for line in lines:
        product_totals[line.product_id] = product_totals.get(line.product_id, 0) + line.quantity

    insufficient = []
    for product_id, qty in product_totals.items():
        on_hand = products[product_id].stock
        if on_hand < qty:
            insufficient.append({
                "product_id": product_id,
                "sku": products[product_id].sku,
                "requested_quantity": qty,
                "on_hand": on_hand,
            })

    if insufficient:
        raise InsufficientStock(
            "Insufficient stock to finalize sale",
            details={"items": insufficient},
        )


def _check_line(line: CartLine) -> None:
    if line.quantity <= 0:
        raise ValidationError(f"Line for product {line.product_id} has no quantity")
    if line.commission_cents + line.brand_revenue_cents != line.line_total_cents:
        raise ValidationError(f"Line for product {line.product_id} has an inconsistent commission split")


def finalize_sale(lines: list[CartLine], customer: CustomerInfo, actor: str | None = None) -> Sale:
    """
    Persist a sale for the given cart lines.

    Steps (all or nothing):
    1. reject an empty cart / blank customer phone
    2. lock the referenced products and re-check stock for every product
    3. insert the sale with totals summed from the lines
    4. decrement stock per line
    5. append the "Recorded Sale" activity entry
    """
    if not lines:
        raise EmptyCart("Cannot finalize a sale with no items")
    if not customer.phone or not customer.phone.strip():
        raise MissingCustomerPhone("Customer phone number is required")

    for line in lines:
        _check_line(line)

    def _op() -> Sale:
        begin_immediate()

        product_ids = sorted({line.product_id for line in lines})
        locked = lock_for_update(
            db.session.query(Product).filter(Product.id.in_(product_ids)).populate_existing()
        ).all()
        products = {p.id: p for p in locked}

        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            raise NotFound("Product no longer exists", details={"product_ids": missing})

        _validate_on_hand(lines, products)

        total_amount = sum(line.line_total_cents for line in lines)
        total_commission = sum(line.commission_cents for line in lines)
        total_brand_revenue = sum(line.brand_revenue_cents for line in lines)
        item_count = sum(line.quantity for line in lines)

        sale = Sale(
            document_number=_next_document_number(),
            total_amount_cents=total_amount,
            total_commission_cents=total_commission,
            total_brand_revenue_cents=total_brand_revenue,
            customer_name=customer.name,
            customer_phone=customer.phone.strip(),
            customer_address=customer.address,
            recorded_by=actor,
        )
        for position, line in enumerate(lines):
            sale.lines.append(SaleLine(
                position=position,
                product_id=line.product_id,
                brand_id=line.brand_id,
                brand_name=line.brand_name,
                product_name=line.product_name,
                sku=line.sku,
                size=line.size,
                commission_rate=line.commission_rate,
                list_price_cents=line.list_price_cents,
                unit_price_cents=line.unit_price_cents,
                quantity=line.quantity,
                commission_cents=line.commission_cents,
                brand_revenue_cents=line.brand_revenue_cents,
            ))
        db.session.add(sale)

        for line in lines:
            products[line.product_id].stock -= line.quantity

        db.session.flush()

        append_log(
            action="Recorded Sale",
            details=(
                f"Sale ID: {sale.document_number} | Amount: {format_cents(total_amount)} "
                f"| Items: {item_count}"
            ),
            user=actor,
        )

        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    logger.info(
        "Sale %s recorded by %s: %s across %d item(s)",
        sale.document_number, actor or "system", format_cents(sale.total_amount_cents), sale.item_count,
    )
    return sale


def finalize_cart(cart: Cart, customer: CustomerInfo, actor: str | None = None) -> Sale:
    """Finalize and empty the cart. A failed attempt leaves the cart untouched."""
    sale = finalize_sale(cart.lines, customer, actor)
    cart.clear()
    return sale
