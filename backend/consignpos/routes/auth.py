# Overview: Flask API routes for operator sign-in; parses input and returns JSON responses.

"""
Operator authentication

The console asks for an operator name only. The returned token goes in the
Authorization header ("Bearer <token>") of every other API call.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import bearer_token, error_response, require_operator
from ..services import session_service
from ..validation import ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    try:
        data = request.get_json(silent=True) or {}
        session, token = session_service.login(data.get("name"))
        return jsonify({
            "operator": session.operator_name,
            "token": token,
            "session": session.to_dict(),
        }), 200
    except ValidationError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to sign in operator")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_operator
def logout_route():
    session_service.logout(bearer_token())
    return jsonify({"message": "Logged out", "operator": g.operator}), 200


@auth_bp.get("/me")
@require_operator
def me_route():
    return jsonify({"operator": g.operator, "session": g.operator_session.to_dict()}), 200
