"""
Checkout orchestrator tests against the in-memory record store.

Verifies:
- Preconditions fail before anything is written
- A completed sale persists a snapshot, decrements stock and accrues loyalty
- A stock failure after persistence cancels the transaction and reports it
- A loyalty failure never undoes the sale
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from liquor_pos.errors import NotFoundError, PartialFailureError, PersistenceError, ValidationError
from liquor_pos.services.cart import Cart
from liquor_pos.services.checkout_service import (
    CheckoutOrchestrator,
    CheckoutState,
    build_cart,
    loyalty_points_for,
)
from liquor_pos.services.session_service import SessionContext

NOW = datetime(2026, 3, 14, 15, 0)
CASHIER = SessionContext(user_id=7, username="cashier", role="cashier")


@pytest.fixture
def store(memory_store):
    memory_store.seed("items", id=1, name="Beer", price=Decimal("20.00"), quantity=10)
    memory_store.seed("items", id=2, name="Wine", price=Decimal("15.00"), quantity=4)
    memory_store.seed("items", id=3, name="Gin", price=Decimal("7.70"), quantity=3)
    memory_store.seed("customers", id=5, name="Dana", phone="555-0142",
                      loyalty_points=0, total_spent=Decimal("0"))
    return memory_store


def make_cart(store, *lines):
    cart = Cart()
    for item_id, quantity in lines:
        cart.add(store.get("items", item_id))
        cart.set_quantity(item_id, quantity)
    return cart


def orchestrator(store, **kwargs):
    return CheckoutOrchestrator(store, clock=lambda: NOW, **kwargs)


class TestPreconditions:
    def test_empty_cart_rejected_before_any_write(self, store):
        with pytest.raises(ValidationError, match="Cart is empty"):
            orchestrator(store).checkout(CASHIER, Cart(), "credit")
        assert store.calls_for("insert") == []

    def test_missing_actor_rejected(self, store):
        with pytest.raises(ValidationError):
            orchestrator(store).checkout(None, make_cart(store, (1, 1)), "credit")
        assert store.calls_for("insert") == []

    def test_blank_payment_method_rejected(self, store):
        with pytest.raises(ValidationError, match="payment_method"):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "  ")

    def test_cash_requires_tendered_amount(self, store):
        with pytest.raises(ValidationError, match="amount_tendered"):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "cash")

    def test_cash_tendered_below_total_rejected(self, store):
        with pytest.raises(ValidationError, match="greater than or equal"):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 2)), "cash", amount_tendered=39.99)
        assert store.calls_for("insert") == []

    @pytest.mark.parametrize("tendered", ["abc", "NaN", "Infinity", True, [20]])
    def test_malformed_tendered_amount_rejected(self, store, tendered):
        with pytest.raises(ValidationError, match="amount_tendered must be a number"):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "cash", amount_tendered=tendered)
        assert store.calls_for("insert") == []

    def test_non_string_payment_method_rejected(self, store):
        with pytest.raises(ValidationError, match="payment_method must be a string"):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), 5)
        assert store.calls_for("insert") == []

    def test_numeric_string_tendered_accepted(self, store):
        result = orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "cash", amount_tendered=" 25.50 ")
        assert result.change_due == Decimal("5.50")

    def test_unknown_customer_not_found(self, store):
        with pytest.raises(NotFoundError):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "credit", customer_id=404)
        assert store.calls_for("insert") == []

    def test_insufficient_stock_rejected_before_persisting(self, store):
        with pytest.raises(ValidationError, match="Insufficient inventory") as exc_info:
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1), (2, 5)), "credit")
        assert exc_info.value.details["items"] == [
            {"item_id": 2, "requested_quantity": 5, "on_hand": 4}
        ]
        assert store.calls_for("insert") == []

    def test_negative_total_rejected(self, store):
        cart = Cart()
        cart.add({"id": 1, "name": "Beer", "price": Decimal("7.00")}, [
            {"type": "fixed", "value": Decimal("5"), "applicable_items": "Beer"},
            {"type": "fixed", "value": Decimal("5"), "applicable_items": "Beer"},
        ])
        assert cart.total() == Decimal("-3.00")
        with pytest.raises(ValidationError, match="negative"):
            orchestrator(store).checkout(CASHIER, cart, "credit")


class TestCompletedCheckout:
    def test_persists_transaction_with_snapshot(self, store):
        cart = make_cart(store, (1, 2), (2, 1))
        result = orchestrator(store).checkout(CASHIER, cart, "Cash", amount_tendered=60)

        assert result.state is CheckoutState.COMPLETED
        txn = store.get("transactions", result.transaction["id"])
        assert txn["type"] == "sale"
        assert txn["status"] == "completed"
        assert txn["payment_method"] == "cash"
        assert txn["amount"] == Decimal("55.00")
        assert txn["cashier_id"] == 7
        assert txn["customer_id"] is None
        assert txn["date"] == NOW
        assert txn["items"] == [
            {"id": 1, "name": "Beer", "quantity": 2, "price": 20.0},
            {"id": 2, "name": "Wine", "quantity": 1, "price": 15.0},
        ]

    def test_decrements_stock_per_line(self, store):
        cart = make_cart(store, (1, 3), (2, 4))
        orchestrator(store).checkout(CASHIER, cart, "debit")
        assert store.get("items", 1)["quantity"] == 7
        assert store.get("items", 2)["quantity"] == 0

    def test_change_due(self, store):
        result = orchestrator(store).checkout(CASHIER, make_cart(store, (2, 1)), "cash", amount_tendered="20")
        assert result.change_due == Decimal("5.00")

    def test_no_customer_means_no_loyalty_call(self, store):
        result = orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "credit")
        assert result.loyalty_applied is False
        assert store.calls_for("increment") == []

    def test_loyalty_accrues_floor_of_amount(self, store):
        cart = make_cart(store, (1, 1), (3, 3))  # 20.00 + 3 * 7.70 = 43.10
        result = orchestrator(store).checkout(CASHIER, cart, "credit", customer_id=5)

        customer = store.get("customers", 5)
        assert result.loyalty_applied is True
        assert customer["loyalty_points"] == 43
        assert customer["total_spent"] == Decimal("43.10")

    def test_loyalty_points_for_whole_and_fractional_amounts(self):
        assert loyalty_points_for(Decimal("42")) == 42
        assert loyalty_points_for(Decimal("42.70")) == 42
        assert loyalty_points_for(Decimal("0.99")) == 0

    def test_amount_rounds_half_up_to_cents(self, store):
        store.seed("items", id=9, name="Odd", price=Decimal("0.125"), quantity=5)
        result = orchestrator(store).checkout(CASHIER, make_cart(store, (9, 1)), "credit")
        assert result.transaction["amount"] == Decimal("0.13")


class TestPersistenceFailures:
    def test_insert_failure_aborts_without_side_effects(self, store):
        store.fail("insert", "transactions")
        with pytest.raises(PersistenceError):
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "credit", customer_id=5)
        assert store.calls_for("decrement_stock") == []
        assert store.calls_for("increment") == []
        assert store.get("items", 1)["quantity"] == 10

    def test_stock_failure_cancels_and_keeps_earlier_decrements(self, store):
        store.fail("decrement_stock", "items", 2)
        cart = make_cart(store, (1, 2), (2, 1))

        with pytest.raises(PartialFailureError) as exc_info:
            orchestrator(store).checkout(CASHIER, cart, "credit", customer_id=5)

        err = exc_info.value
        txn = store.get("transactions", err.transaction_id)
        assert txn["status"] == "cancelled"
        assert err.details["failed_item_id"] == 2
        assert err.details["cancel_recorded"] is True
        assert err.details["pending_compensations"] == [{"item_id": 1, "quantity": 2}]
        assert store.get("items", 1)["quantity"] == 8
        assert store.get("items", 2)["quantity"] == 4
        # loyalty never runs for a cancelled sale
        assert store.get("customers", 5)["loyalty_points"] == 0

    def test_stock_failure_restocks_when_enabled(self, store):
        store.fail("decrement_stock", "items", 2)
        cart = make_cart(store, (1, 2), (2, 1))

        with pytest.raises(PartialFailureError) as exc_info:
            orchestrator(store, restock_on_failure=True).checkout(CASHIER, cart, "credit")

        assert store.get("items", 1)["quantity"] == 10
        assert exc_info.value.details["restocked"] == [{"item_id": 1, "quantity": 2}]
        assert exc_info.value.details["pending_compensations"] == []

    def test_cancel_update_failure_is_reported(self, store):
        store.fail("decrement_stock", "items", 1)
        store.fail("update", "transactions")

        with pytest.raises(PartialFailureError) as exc_info:
            orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "credit")

        err = exc_info.value
        assert err.details["cancel_recorded"] is False
        assert store.get("transactions", err.transaction_id)["status"] == "completed"

    def test_loyalty_failure_keeps_completed_sale(self, store):
        store.fail("increment", "customers", 5)
        result = orchestrator(store).checkout(CASHIER, make_cart(store, (1, 1)), "credit", customer_id=5)

        assert result.state is CheckoutState.COMPLETED
        assert result.loyalty_applied is False
        assert "failed" in result.loyalty_error
        assert store.get("transactions", result.transaction["id"])["status"] == "completed"
        assert store.get("items", 1)["quantity"] == 9


class TestBuildCart:
    def test_prices_with_active_promotions_only(self, store):
        store.seed("promotions", name="Beer week", type="percentage", value=Decimal("10"),
                   applicable_items="Beer", start_date=date(2026, 3, 10), end_date=date(2026, 3, 14))
        store.seed("promotions", name="Old", type="fixed", value=Decimal("5"),
                   applicable_items="Beer", start_date=date(2026, 1, 1), end_date=date(2026, 1, 31))

        cart = build_cart(store, [{"item_id": 1, "quantity": 2}], now=NOW)
        assert cart.line(1).price == Decimal("18.00")
        assert cart.total() == Decimal("36.00")

    def test_repeated_lines_are_merged(self, store):
        cart = build_cart(store, [{"item_id": 2, "quantity": 1}, {"item_id": 2, "quantity": 2}], now=NOW)
        assert cart.line(2).quantity == 3

    def test_unknown_item_not_found(self, store):
        with pytest.raises(NotFoundError):
            build_cart(store, [{"item_id": 99, "quantity": 1}], now=NOW)

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True])
    def test_bad_quantity_rejected(self, store, quantity):
        with pytest.raises(ValidationError):
            build_cart(store, [{"item_id": 1, "quantity": quantity}], now=NOW)
