# Overview: Flask API routes for the store profile used on invoices.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import settings_service
from ..validation import ValidationError


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/store-profile")
@require_operator
def get_store_profile_route():
    return jsonify(settings_service.get_store_profile()), 200


@settings_bp.put("/store-profile")
@require_operator
def replace_store_profile_route():
    """
    Request body:
    {"name": "...", "address": "...", "phone": "...", "email": "...", "tax_id": "..."}
    """
    try:
        profile = settings_service.replace_store_profile(request.get_json(silent=True), actor=g.operator)
        return jsonify(profile), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to save store profile")
        return jsonify({"error": "Internal server error"}), 500
