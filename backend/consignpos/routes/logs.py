# Overview: Flask API route for the activity log.

from flask import Blueprint, request, jsonify

from ..decorators import error_response, require_operator
from ..services import audit_service
from ..time_utils import parse_iso_datetime
from ..validation import ValidationError


logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
@require_operator
def list_logs_route():
    """
    Newest first.

    Query parameters:
    - limit: max entries (default 200, max 1000)
    - since: ISO-8601 timestamp; only entries after it
    """
    limit = request.args.get("limit", 200, type=int)
    limit = max(1, min(limit, 1000))
    try:
        since = parse_iso_datetime(request.args.get("since"))
    except ValueError:
        return error_response(ValidationError("since must be an ISO-8601 timestamp"))
    return jsonify(audit_service.list_logs(limit=limit, since=since)), 200
