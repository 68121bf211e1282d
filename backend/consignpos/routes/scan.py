# Overview: Public product lookup behind a printed QR label.

from flask import Blueprint, jsonify

from ..decorators import error_response
from ..errors import ConsoleError
from ..services import inventory_service


scan_bp = Blueprint("scan", __name__, url_prefix="/api/scan")


@scan_bp.get("/<token>")
def scan_route(token: str):
    # No session: this is what a customer's phone opens from the label
    try:
        return jsonify(inventory_service.resolve_scan_token(token)), 200
    except ConsoleError as e:
        return error_response(e)
