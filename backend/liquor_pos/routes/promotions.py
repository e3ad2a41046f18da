# Overview: Flask API routes for promotions operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services import promotions_service

promotions_bp = Blueprint("promotions", __name__, url_prefix="/api/promotions")


@promotions_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_promotions_route():
    active_only = request.args.get("active_only", "false").lower() in ("1", "true", "yes")
    try:
        promotions = promotions_service.list_promotions(get_record_store(), active_only=active_only)
        return jsonify({"promotions": promotions})
    except POSError as e:
        return error_response(e)


@promotions_bp.post("")
@require_auth
@require_permission("MANAGE_PROMOTIONS")
def create_promotion_route():
    data = request.get_json(silent=True) or {}
    try:
        promo = promotions_service.create_promotion(get_record_store(), data)
    except POSError as e:
        return error_response(e)
    return jsonify(promo), 201


@promotions_bp.put("/<int:promo_id>")
@require_auth
@require_permission("MANAGE_PROMOTIONS")
def update_promotion_route(promo_id: int):
    data = request.get_json(silent=True) or {}
    try:
        return jsonify(promotions_service.update_promotion(get_record_store(), promo_id, data))
    except POSError as e:
        return error_response(e)


@promotions_bp.delete("/<int:promo_id>")
@require_auth
@require_permission("MANAGE_PROMOTIONS")
def delete_promotion_route(promo_id: int):
    try:
        promotions_service.delete_promotion(get_record_store(), promo_id)
    except POSError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200
