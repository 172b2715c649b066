# Overview: Flask API routes for reports; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import reporting_service
from ..services.reporting_service import ReportError


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/sales")
def sales_report_route():
    """
    Query params:
    - start, end: ISO-8601 datetimes (optional)
    - recent: int (optional, default 10) - number of latest sales to include
    """
    try:
        summary = reporting_service.sales_summary(
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
    except ReportError as e:
        return jsonify({"error": str(e)}), 400

    recent = min(request.args.get("recent", 10, type=int), 100)
    summary["recent_sales"] = [
        s.to_dict(include_lines=False) for s in reporting_service.recent_sales(limit=recent)
    ]
    return jsonify(summary), 200


@reports_bp.get("/restock")
def restock_report_route():
    """
    Query params:
    - threshold: int (optional, default POS_LOW_STOCK_THRESHOLD)
    """
    threshold = request.args.get(
        "threshold",
        current_app.config.get("POS_LOW_STOCK_THRESHOLD", 5),
        type=int,
    )
    try:
        items = reporting_service.restock_list(threshold=threshold)
    except ReportError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"threshold": threshold, "products": items}), 200
