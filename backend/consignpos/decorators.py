# Overview: Request decorators and shared error responses for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_operator(f):
    """
    Require a signed-in operator.

    Sets:
    - g.operator: the operator's display name (recorded on activity entries)
    - g.operator_session: the OperatorSession row

    Returns 401 if the Authorization header is missing, or the token is
    unknown, revoked or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        session = session_service.validate_session(token)
        if session is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.operator = session.operator_name
        g.operator_session = session
        return f(*args, **kwargs)

    return decorated_function


def error_response(exc):
    """JSON body + status for a ConsoleError or ValidationError."""
    return jsonify(exc.to_dict()), exc.status_code
