# Overview: Flask API routes for items operations; parses input and returns JSON responses.

# backend/liquor_pos/routes/items.py
"""
Item catalog routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_INVENTORY permission (every role)
- Write operations require MANAGE_INVENTORY permission (admin, manager)

Items cannot be deleted.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services import items_service

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_items_route():
    """
    List items.

    Query params:
    - q: str (optional) - substring of name, barcode, category or supplier
    - order_by: "name" (default) or "rank"
    """
    try:
        items = items_service.list_items(
            get_record_store(),
            query=request.args.get("q"),
            order_by=request.args.get("order_by", "name"),
        )
        return jsonify({"items": items, "count": len(items)})
    except POSError as e:
        return error_response(e)


@items_bp.get("/low-stock")
@require_auth
@require_permission("VIEW_INVENTORY")
def low_stock_route():
    """Items below LOW_STOCK_THRESHOLD, lowest first. ?threshold= overrides the config value."""
    threshold = request.args.get("threshold", type=int)
    if threshold is None:
        threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    try:
        items = items_service.low_stock_items(get_record_store(), threshold=threshold)
        return jsonify({"items": items, "threshold": threshold})
    except POSError as e:
        return error_response(e)


@items_bp.get("/barcode/<string:barcode>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_item_by_barcode_route(barcode: str):
    try:
        return jsonify(items_service.get_item_by_barcode(get_record_store(), barcode))
    except POSError as e:
        return error_response(e)


@items_bp.get("/<int:item_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_item_route(item_id: int):
    try:
        return jsonify(items_service.get_item(get_record_store(), item_id))
    except POSError as e:
        return error_response(e)


@items_bp.post("")
@require_auth
@require_permission("MANAGE_INVENTORY")
def create_item_route():
    """Create an item. Requires MANAGE_INVENTORY permission."""
    payload = request.get_json(silent=True) or {}
    try:
        created = items_service.create_item(get_record_store(), payload)
    except POSError as e:
        return error_response(e)
    return jsonify(created), 201


@items_bp.put("/<int:item_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def update_item_route(item_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        return jsonify(items_service.update_item(get_record_store(), item_id, payload))
    except POSError as e:
        return error_response(e)


@items_bp.post("/<int:item_id>/adjust")
@require_auth
@require_permission("MANAGE_INVENTORY")
def adjust_item_route(item_id: int):
    """
    Set on-hand quantity after a count.

    Request body:
    {
        "quantity": 24       // required, new on-hand quantity (>= 0)
    }
    """
    payload = request.get_json(silent=True) or {}
    if "quantity" not in payload:
        return jsonify({"error": "quantity is required"}), 400
    try:
        return jsonify(items_service.adjust_quantity(get_record_store(), item_id, payload["quantity"]))
    except POSError as e:
        return error_response(e)
