# Overview: Flask API routes for settlements, invoice drafts and the dashboard.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import invoice_service, reporting_service, settlement_service
from ..validation import ValidationError
from .sales import date_range_from_args


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/settlements")
@require_operator
def settlements_route():
    """
    Per-brand payout rows for the date filter.

    Query parameters:
    - filter / month / start / end: see sales listing
    - brand_id: a single brand
    - include_items: "false" to omit line items
    """
    try:
        include_items = request.args.get("include_items", "true").lower() != "false"
        return jsonify(settlement_service.settlement_report(
            date_range=date_range_from_args(),
            brand_id=request.args.get("brand_id", type=int),
            include_items=include_items,
        )), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)


@reports_bp.post("/settlements/<int:brand_id>/invoice")
@require_operator
def invoice_draft_route(brand_id: int):
    """
    Draft an invoice for one brand. The settlement row is always returned;
    "generated" is false when the draft is a placeholder.
    """
    try:
        return jsonify(invoice_service.draft_invoice(brand_id, date_range_from_args())), 200
    except (ConsoleError, ValidationError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to draft invoice")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/dashboard")
@require_operator
def dashboard_route():
    return jsonify(reporting_service.dashboard_summary()), 200


@reports_bp.post("/dashboard/insights")
@require_operator
def dashboard_insights_route():
    try:
        return jsonify(invoice_service.dashboard_insights()), 200
    except Exception:
        current_app.logger.exception("Failed to generate dashboard insights")
        return jsonify({"error": "Internal server error"}), 500
