# Overview: Flask API routes for consignment products; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import inventory_service
from ..services.inventory_service import ProductIntake
from ..validation import ValidationError


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_operator
def list_products_route():
    """
    Query parameters:
    - brand_id: only this brand's products
    - q: substring of name or SKU
    - since: ISO-8601 timestamp; only products changed after it

    Items are sorted by stock ascending.
    """
    try:
        return jsonify(inventory_service.list_products(
            brand_id=request.args.get("brand_id", type=int),
            q=request.args.get("q"),
            since=request.args.get("since"),
        )), 200
    except ValidationError as e:
        return error_response(e)


@products_bp.get("/<int:product_id>")
@require_operator
def get_product_route(product_id: int):
    try:
        return jsonify(inventory_service.get_product(product_id)), 200
    except ConsoleError as e:
        return error_response(e)


@products_bp.post("")
@require_operator
def create_product_route():
    """
    Request body:
    {
        "brand_id": 1,
        "name": "Linen Shirt",
        "size": "M",
        "category": "Tops",
        "cost_price_cents": 1200,
        "selling_price_cents": 2500,
        "stock": 10,
        "sku_mode": "auto",     // or "manual" with "sku"
        "sku": null
    }
    """
    try:
        intake = ProductIntake.from_payload(request.get_json(silent=True))
        product = inventory_service.create_product(intake, actor=g.operator)
        return jsonify(product.to_dict()), 201
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.patch("/<int:product_id>")
@require_operator
def update_product_route(product_id: int):
    try:
        product = inventory_service.update_product(
            product_id, request.get_json(silent=True) or {}, actor=g.operator
        )
        return jsonify(product.to_dict()), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/<int:product_id>/restock")
@require_operator
def restock_product_route(product_id: int):
    try:
        data = request.get_json(silent=True) or {}
        product = inventory_service.restock_product(product_id, data.get("quantity"), actor=g.operator)
        return jsonify(product.to_dict()), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to restock product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>/qr")
@require_operator
def product_qr_route(product_id: int):
    try:
        return jsonify(inventory_service.qr_payload(product_id)), 200
    except ConsoleError as e:
        return error_response(e)
