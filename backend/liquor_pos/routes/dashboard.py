# Overview: Flask API routes for dashboard operations; parses input and returns JSON responses.

"""
Dashboard routes (admin and manager). All reads; figures come from
completed sales only.
"""
from flask import Blueprint, current_app, jsonify

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services import dashboard_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/metrics")
@require_auth
@require_permission("VIEW_REPORTS")
def metrics_route():
    try:
        return jsonify(dashboard_service.get_metrics(get_record_store()))
    except POSError as e:
        return error_response(e)


@dashboard_bp.get("/monthly-sales")
@require_auth
@require_permission("VIEW_REPORTS")
def monthly_sales_route():
    try:
        return jsonify({"months": dashboard_service.get_monthly_sales(get_record_store())})
    except POSError as e:
        return error_response(e)


@dashboard_bp.get("/recent-sales")
@require_auth
@require_permission("VIEW_REPORTS")
def recent_sales_route():
    try:
        return jsonify({"sales": dashboard_service.get_recent_sales(get_record_store())})
    except POSError as e:
        return error_response(e)


@dashboard_bp.get("/low-stock")
@require_auth
@require_permission("VIEW_REPORTS")
def low_stock_route():
    try:
        items = dashboard_service.get_low_stock(
            get_record_store(),
            threshold=current_app.config["LOW_STOCK_THRESHOLD"],
        )
        return jsonify({"items": items})
    except POSError as e:
        return error_response(e)
