# Overview: In-memory checkout cart; nothing here touches the database for writes.

"""
Cart Engine

One line per product. Repeat scans bump the quantity of the existing line.
Every mutation recomputes the line's commission split from scratch via
split_commission() at the line's current unit price and the brand's current
rate, so commission + brand revenue always equals price x quantity.

The cart reads products and brands through injected stores and keeps only
plain values, so a cart can outlive the request that created it.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from flask import current_app

from ..errors import InsufficientStock, NotFound, OutOfStock
from ..repositories import BrandStore, ProductStore
from ..time_utils import to_utc_z, utcnow
from ..validation import validate_price_cents
from .commission_service import split_commission


@dataclass
class CartLine:
    product_id: int
    brand_id: int
    brand_name: str
    product_name: str
    sku: str
    size: str
    commission_rate: Decimal
    list_price_cents: int
    unit_price_cents: int
    quantity: int
    commission_cents: int = 0
    brand_revenue_cents: int = 0

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def recompute(self) -> None:
        split = split_commission(self.unit_price_cents, self.quantity, self.commission_rate)
        self.commission_cents = split.commission_cents
        self.brand_revenue_cents = split.brand_revenue_cents

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "product_name": self.product_name,
            "sku": self.sku,
            "size": self.size,
            "commission_rate": float(self.commission_rate),
            "list_price_cents": self.list_price_cents,
            "unit_price_cents": self.unit_price_cents,
            "quantity": self.quantity,
            "line_total_cents": self.line_total_cents,
            "commission_cents": self.commission_cents,
            "brand_revenue_cents": self.brand_revenue_cents,
            "is_price_override": self.unit_price_cents != self.list_price_cents,
        }


class Cart:
    def __init__(self, products: ProductStore, brands: BrandStore, cart_id: str | None = None):
        self.products = products
        self.brands = brands
        self.id = cart_id or uuid.uuid4().hex
        self.created_at = utcnow()
        self._lines: dict[int, CartLine] = {}

    # ------------------------------------------------------------------ reads

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def line(self, product_id: int) -> CartLine:
        line = self._lines.get(product_id)
        if line is None:
            raise NotFound("Item is not in the cart", details={"product_id": product_id})
        return line

    def totals(self) -> dict:
        return {
            "total_amount_cents": sum(l.line_total_cents for l in self._lines.values()),
            "total_commission_cents": sum(l.commission_cents for l in self._lines.values()),
            "total_brand_revenue_cents": sum(l.brand_revenue_cents for l in self._lines.values()),
            "item_count": sum(l.quantity for l in self._lines.values()),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": to_utc_z(self.created_at),
            "lines": [l.to_dict() for l in self._lines.values()],
            **self.totals(),
        }

    # -------------------------------------------------------------- mutations

    def add(self, identifier: str) -> CartLine:
        """
        Add one unit of the product matching a SKU, QR token or id.

        Raises NotFound on a lookup miss and OutOfStock when every unit on
        hand is already in the cart.
        """
        product = self.products.resolve(identifier)
        if product is None:
            raise NotFound("Product not found", details={"identifier": identifier})

        existing = self._lines.get(product.id)
        in_cart = existing.quantity if existing else 0
        if product.stock - in_cart <= 0:
            raise OutOfStock(
                "Product out of stock",
                details={"product_id": product.id, "stock": product.stock, "in_cart": in_cart},
            )

        if existing is not None:
            existing.quantity += 1
            self._refresh_rate(existing)
            existing.recompute()
            return existing

        brand = self.brands.get(product.brand_id)
        if brand is None:
            raise NotFound("Brand not found for product", details={"product_id": product.id})

        line = CartLine(
            product_id=product.id,
            brand_id=brand.id,
            brand_name=brand.name,
            product_name=product.name,
            sku=product.sku,
            size=product.size or "",
            commission_rate=Decimal(brand.commission_rate),
            list_price_cents=product.selling_price_cents,
            unit_price_cents=product.selling_price_cents,
            quantity=1,
        )
        line.recompute()
        self._lines[product.id] = line
        return line

    def adjust_quantity(self, product_id: int, delta: int) -> CartLine | None:
        """
        Change a line's quantity by delta. Returns None when the line was
        removed because the quantity reached zero.
        """
        line = self.line(product_id)
        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self.remove(product_id)
            return None

        product = self.products.get(product_id)
        if product is None:
            raise NotFound("Product not found", details={"product_id": product_id})
        if new_quantity > product.stock:
            raise InsufficientStock(
                "Max stock reached",
                details={
                    "product_id": product_id,
                    "requested_quantity": new_quantity,
                    "on_hand": product.stock,
                },
            )

        line.quantity = new_quantity
        self._refresh_rate(line)
        line.recompute()
        return line

    def override_price(self, product_id: int, unit_price_cents) -> CartLine:
        """Checkout discount/markup: replace the unit price for the whole line."""
        line = self.line(product_id)
        line.unit_price_cents = validate_price_cents(unit_price_cents, "unit_price_cents")
        self._refresh_rate(line)
        line.recompute()
        return line

    def remove(self, product_id: int) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def _refresh_rate(self, line: CartLine) -> None:
        # A brand deleted mid-checkout keeps the rate captured when scanned
        brand = self.brands.get(line.brand_id)
        if brand is not None:
            line.commission_rate = Decimal(brand.commission_rate)


class CartRegistry:
    """Open checkout carts for this process, keyed by cart id."""

    def __init__(self):
        self._carts: dict[str, Cart] = {}
        self._lock = threading.Lock()

    def open(self, products: ProductStore | None = None, brands: BrandStore | None = None) -> Cart:
        cart = Cart(products or ProductStore(), brands or BrandStore())
        with self._lock:
            self._carts[cart.id] = cart
        return cart

    def get(self, cart_id: str) -> Cart:
        with self._lock:
            cart = self._carts.get(cart_id)
        if cart is None:
            raise NotFound("Cart not found", details={"cart_id": cart_id})
        return cart

    def discard(self, cart_id: str) -> bool:
        with self._lock:
            return self._carts.pop(cart_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)


def get_cart_registry() -> CartRegistry:
    return current_app.extensions["consignpos.carts"]
