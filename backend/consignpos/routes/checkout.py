# Overview: Flask API routes for the checkout cart and sale finalization.

"""
Checkout Routes

Carts live in the app process (see CartRegistry) and are addressed by id.
Every cart response carries the full cart: lines, per-line commission
split and totals.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import checkout_service
from ..services.cart_service import get_cart_registry
from ..services.checkout_service import CustomerInfo
from ..validation import ValidationError, validate_int


checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")


@checkout_bp.post("/carts")
@require_operator
def open_cart_route():
    cart = get_cart_registry().open()
    return jsonify(cart.to_dict()), 201


@checkout_bp.get("/carts/<cart_id>")
@require_operator
def get_cart_route(cart_id: str):
    try:
        return jsonify(get_cart_registry().get(cart_id).to_dict()), 200
    except ConsoleError as e:
        return error_response(e)


@checkout_bp.delete("/carts/<cart_id>")
@require_operator
def discard_cart_route(cart_id: str):
    if not get_cart_registry().discard(cart_id):
        return jsonify({"error": "Cart not found", "code": "NOT_FOUND", "details": {"cart_id": cart_id}}), 404
    return jsonify({"message": "Cart discarded", "cart_id": cart_id}), 200


@checkout_bp.post("/carts/<cart_id>/items")
@require_operator
def add_item_route(cart_id: str):
    """
    Scan or type a product into the cart.

    Request body: {"identifier": "<SKU | QR token | product id>"}
    """
    try:
        data = request.get_json(silent=True) or {}
        identifier = data.get("identifier") or data.get("sku") or data.get("qr_token") or data.get("product_id")
        if identifier is None or str(identifier).strip() == "":
            raise ValidationError("identifier is required")

        cart = get_cart_registry().get(cart_id)
        cart.add(str(identifier))
        return jsonify(cart.to_dict()), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add item to cart")
        return jsonify({"error": "Internal server error"}), 500


@checkout_bp.patch("/carts/<cart_id>/items/<int:product_id>")
@require_operator
def update_item_route(cart_id: str, product_id: int):
    """
    Request body (any of):
    - {"delta": -1}               step the quantity; reaching 0 removes the line
    - {"quantity": 3}             set the quantity
    - {"unit_price_cents": 1800}  override the unit price for this line
    """
    try:
        data = request.get_json(silent=True) or {}
        cart = get_cart_registry().get(cart_id)

        if "delta" in data or "quantity" in data:
            if "delta" in data:
                delta = validate_int(data["delta"], "delta")
            else:
                delta = validate_int(data["quantity"], "quantity") - cart.line(product_id).quantity
            line = cart.adjust_quantity(product_id, delta)
            if line is None and "unit_price_cents" in data:
                raise ValidationError("Cannot reprice a line that was removed")

        if "unit_price_cents" in data:
            cart.override_price(product_id, data["unit_price_cents"])

        if not any(k in data for k in ("delta", "quantity", "unit_price_cents")):
            raise ValidationError("Provide delta, quantity or unit_price_cents")

        return jsonify(cart.to_dict()), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update cart line")
        return jsonify({"error": "Internal server error"}), 500


@checkout_bp.delete("/carts/<cart_id>/items/<int:product_id>")
@require_operator
def remove_item_route(cart_id: str, product_id: int):
    try:
        cart = get_cart_registry().get(cart_id)
        cart.remove(product_id)
        return jsonify(cart.to_dict()), 200
    except ConsoleError as e:
        return error_response(e)


@checkout_bp.post("/carts/<cart_id>/finalize")
@require_operator
def finalize_route(cart_id: str):
    """
    Record the sale and decrement stock in one transaction.

    Request body:
    {"customer": {"phone": "555-0100", "name": "...", "address": "..."}}

    On failure nothing is written and the cart is left as it was.
    """
    try:
        data = request.get_json(silent=True) or {}
        customer = CustomerInfo.from_payload(data.get("customer"))
        cart = get_cart_registry().get(cart_id)
        sale = checkout_service.finalize_cart(cart, customer, actor=g.operator)
        return jsonify({"sale": sale.to_dict(include_lines=True), "cart": cart.to_dict()}), 201
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to finalize sale")
        return jsonify({"error": "Internal server error"}), 500
