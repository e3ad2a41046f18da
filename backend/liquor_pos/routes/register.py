# Overview: Flask API routes for register operations; parses input and returns JSON responses.

# backend/liquor_pos/routes/register.py
"""
Register routes: price a cart, check out, and the age check shown at the till.

The register is stateless on the server. The client sends its line
selections on every call; prices always come from the stored items and the
promotions active right now, never from the client.

SECURITY: All routes require PROCESS_SALES (every authenticated role).
"""
from datetime import date

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..repositories import get_record_store
from ..services.checkout_service import CheckoutOrchestrator, build_cart, round_money
from ..time_utils import minimum_birth_date, utcnow

register_bp = Blueprint("register", __name__, url_prefix="/api/register")


@register_bp.post("/quote")
@require_auth
@require_permission("PROCESS_SALES")
def quote_route():
    """
    Price line selections without persisting anything.

    Request body:
    {
        "lines": [{"item_id": 1, "quantity": 2}]
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        cart = build_cart(get_record_store(), payload.get("lines") or [])
    except POSError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Quote failed")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "lines": [dict(line, line_total=line["price"] * line["quantity"]) for line in cart.snapshot()],
        "item_count": sum(line.quantity for line in cart),
        "total": round_money(cart.total()),
    })


@register_bp.post("/checkout")
@require_auth
@require_permission("PROCESS_SALES")
def checkout_route():
    """
    Complete a sale.

    Request body:
    {
        "lines": [{"item_id": 1, "quantity": 2}],   // required, non-empty
        "payment_method": "cash",                   // required, free text up to 32 chars (cash, credit, debit)
        "amount_tendered": 50.00,                   // required for cash
        "customer_id": 7                            // optional, accrues loyalty
    }

    Returns 201 with the transaction and change due. A 502 with
    details.transaction_id means the sale was recorded and then cancelled
    because stock could not be taken.
    """
    payload = request.get_json(silent=True) or {}
    store = get_record_store()
    orchestrator = CheckoutOrchestrator(
        store,
        restock_on_failure=current_app.config["CHECKOUT_RESTOCK_ON_FAILURE"],
    )

    try:
        cart = build_cart(store, payload.get("lines") or [])
        result = orchestrator.checkout(
            g.session_context,
            cart,
            payload.get("payment_method"),
            amount_tendered=payload.get("amount_tendered"),
            customer_id=payload.get("customer_id"),
        )
    except POSError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Checkout failed")
        return jsonify({"error": "Internal server error"}), 500

    cart.clear()
    return jsonify(result.to_dict()), 201


@register_bp.get("/age-check")
@require_auth
@require_permission("PROCESS_SALES")
def age_check_route():
    """
    Latest birth date allowed to buy age-restricted products today.

    Optional query param birth_date=YYYY-MM-DD adds an "eligible" flag.
    """
    min_age = current_app.config["MINIMUM_PURCHASE_AGE"]
    cutoff = minimum_birth_date(min_age, utcnow().date())
    body = {"minimum_age": min_age, "born_on_or_before": cutoff}

    raw = request.args.get("birth_date")
    if raw:
        try:
            birth_date = date.fromisoformat(raw)
        except ValueError:
            return jsonify({"error": "birth_date must be YYYY-MM-DD"}), 400
        body["birth_date"] = birth_date
        body["eligible"] = birth_date <= cutoff

    return jsonify(body)
