# Overview: Flask API routes for consignment brands; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import brand_service
from ..validation import ValidationError


brands_bp = Blueprint("brands", __name__, url_prefix="/api/brands")


@brands_bp.get("")
@require_operator
def list_brands_route():
    """
    Query parameters:
    - since: ISO-8601 timestamp; only brands changed after it
    """
    try:
        return jsonify(brand_service.list_brands(since=request.args.get("since"))), 200
    except ValidationError as e:
        return error_response(e)


@brands_bp.get("/<int:brand_id>")
@require_operator
def get_brand_route(brand_id: int):
    try:
        return jsonify(brand_service.get_brand(brand_id)), 200
    except ConsoleError as e:
        return error_response(e)


@brands_bp.post("")
@require_operator
def create_brand_route():
    """
    Request body:
    {
        "name": "Northwind",              // required
        "type": "EXCLUSIVE",              // or NON_EXCLUSIVE
        "commission_rate": 15,            // optional, defaults by type
        "contact_email": "...",
        "contact_phone": "..."
    }
    """
    try:
        brand = brand_service.onboard_brand(request.get_json(silent=True) or {}, actor=g.operator)
        return jsonify(brand.to_dict()), 201
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to onboard brand")
        return jsonify({"error": "Internal server error"}), 500


@brands_bp.patch("/<int:brand_id>")
@require_operator
def update_brand_route(brand_id: int):
    try:
        brand = brand_service.update_brand(brand_id, request.get_json(silent=True) or {}, actor=g.operator)
        return jsonify(brand.to_dict()), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update brand")
        return jsonify({"error": "Internal server error"}), 500


@brands_bp.delete("/<int:brand_id>")
@require_operator
def delete_brand_route(brand_id: int):
    try:
        brand_service.delete_brand(brand_id, actor=g.operator)
        return jsonify({"message": "Brand deleted", "brand_id": brand_id}), 200
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete brand")
        return jsonify({"error": "Internal server error"}), 500
