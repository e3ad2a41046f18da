# Overview: Flask API routes for customers operations; parses input and returns JSON responses.

"""
Customer routes. Every authenticated role manages customers at the register.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services import customers_service

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def list_customers_route():
    try:
        customers = customers_service.list_customers(get_record_store())
        return jsonify({"customers": customers, "count": len(customers)})
    except POSError as e:
        return error_response(e)


@customers_bp.get("/search")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def search_customers_route():
    """Query param q: at least 2 characters, matched against name, phone and email."""
    try:
        customers = customers_service.search_customers(
            get_record_store(),
            request.args.get("q", ""),
            limit=current_app.config["CUSTOMER_SEARCH_LIMIT"],
        )
        return jsonify({"customers": customers})
    except POSError as e:
        return error_response(e)


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def get_customer_route(customer_id: int):
    try:
        return jsonify(customers_service.get_customer(get_record_store(), customer_id))
    except POSError as e:
        return error_response(e)


@customers_bp.post("")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def create_customer_route():
    """Quick add from the register: name and phone required, email optional."""
    payload = request.get_json(silent=True) or {}
    try:
        created = customers_service.create_customer(get_record_store(), payload)
    except POSError as e:
        return error_response(e)
    return jsonify(created), 201


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        return jsonify(customers_service.update_customer(get_record_store(), customer_id, payload))
    except POSError as e:
        return error_response(e)


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def delete_customer_route(customer_id: int):
    try:
        customers_service.delete_customer(get_record_store(), customer_id)
    except POSError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200
