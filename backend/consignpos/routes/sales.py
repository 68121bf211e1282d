# Overview: Flask API routes for recorded sales; listing, detail and CSV export.

from flask import Blueprint, Response, request, jsonify

from ..decorators import error_response, require_operator
from ..errors import ConsoleError
from ..services import reporting_service
from ..services.settlement_service import DateRange
from ..validation import ValidationError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def date_range_from_args() -> DateRange:
    """
    ?filter=all|month|custom with month=YYYY-MM or start/end=YYYY-MM-DD.
    """
    return DateRange.parse(
        request.args.get("filter"),
        month=request.args.get("month"),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )


@sales_bp.get("")
@require_operator
def list_sales_route():
    """Sales newest first, each with its lines. Accepts the date filter or since=."""
    try:
        return jsonify(reporting_service.list_sales(
            date_range=date_range_from_args(),
            since=request.args.get("since"),
        )), 200
    except ValidationError as e:
        return error_response(e)


@sales_bp.get("/<int:sale_id>")
@require_operator
def get_sale_route(sale_id: int):
    try:
        return jsonify(reporting_service.get_sale(sale_id)), 200
    except ConsoleError as e:
        return error_response(e)


@sales_bp.get("/export.csv")
@require_operator
def export_sales_csv_route():
    try:
        date_range = date_range_from_args()
    except ValidationError as e:
        return error_response(e)

    body = reporting_service.sales_csv(date_range)
    return Response(
        body,
        mimetype="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{reporting_service.csv_filename(date_range)}"',
        },
    )
