# Overview: Flask API routes for transaction history; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services import transactions_service

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_auth
@require_permission("VIEW_TRANSACTIONS")
def list_transactions_route():
    """
    Transaction history, newest first, with cashier username and customer name.

    Query params (all optional):
    - from, to: ISO-8601 datetimes, inclusive
    - type: sale | refund
    - status: completed | pending | cancelled
    """
    try:
        transactions = transactions_service.list_transactions(
            get_record_store(),
            start=request.args.get("from"),
            end=request.args.get("to"),
            type=request.args.get("type"),
            status=request.args.get("status"),
        )
        return jsonify({"transactions": transactions, "count": len(transactions)})
    except POSError as e:
        return error_response(e)


@transactions_bp.get("/<int:transaction_id>")
@require_auth
@require_permission("VIEW_TRANSACTIONS")
def get_transaction_route(transaction_id: int):
    try:
        return jsonify(transactions_service.get_transaction(get_record_store(), transaction_id))
    except POSError as e:
        return error_response(e)
