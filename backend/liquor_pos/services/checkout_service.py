# Overview: Service-layer operations for checkout; turns a priced cart into a persisted sale.

"""
Checkout Orchestrator

One checkout attempt moves through:

    building -> submitting -> completed
                           -> cancelled   (inventory step failed after persist)
             -> aborted                   (transaction could not be persisted)

Steps, in order, against the record store:

1. Validate: actor present, cart non-empty, payment method given, cash
   tendered >= total, customer exists, stock on hand covers every line.
   Nothing is written before all of these pass.
2. Persist the transaction (type sale, status completed). Failure aborts
   the attempt with no side effects.
3. Decrement stock line by line. Each successful decrement is logged as a
   pending compensation. The first failure marks the transaction cancelled
   (best effort), optionally re-credits the logged decrements, and raises
   PartialFailureError.
4. Accrue loyalty for the customer: total_spent += amount and
   loyalty_points += floor(amount). A failure here is logged and reported on
   the result; the sale stands.

The record store offers no multi-statement transaction, so step 3 is
compensated rather than rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Iterable

from ..errors import PartialFailureError, POSError, ValidationError
from ..repositories import RecordStore
from ..time_utils import utcnow
from .cart import Cart
from .pricing import to_decimal
from .promotions_service import get_active_promotions
from .session_service import SessionContext

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

TRANSACTION_SALE = "sale"

STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

PAYMENT_CASH = "cash"
MAX_PAYMENT_METHOD_LENGTH = 32


class CheckoutState(str, Enum):
    BUILDING = "building"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({CheckoutState.COMPLETED, CheckoutState.CANCELLED, CheckoutState.ABORTED})


@dataclass(frozen=True)
class Compensation:
    """Undo record for one applied stock decrement."""
    item_id: int
    quantity: int

    def to_dict(self) -> dict:
        return {"item_id": self.item_id, "quantity": self.quantity}


@dataclass
class CheckoutAttempt:
    """State and compensation log of a single checkout."""
    state: CheckoutState = CheckoutState.BUILDING
    transaction_id: int | None = None
    pending_compensations: list[Compensation] = field(default_factory=list)

    def advance(self, new_state: CheckoutState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Checkout already finished in state {self.state.value}")
        logger.debug("Checkout %s: %s -> %s", self.transaction_id, self.state.value, new_state.value)
        self.state = new_state


@dataclass
class CheckoutResult:
    state: CheckoutState
    transaction: dict
    change_due: Decimal
    loyalty_applied: bool = False
    loyalty_error: str | None = None

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "transaction": self.transaction,
            "change_due": self.change_due,
            "loyalty_applied": self.loyalty_applied,
            "loyalty_error": self.loyalty_error,
        }


def round_money(amount: Decimal) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def loyalty_points_for(amount: Decimal) -> int:
    """One point per whole currency unit spent."""
    return int(to_decimal(amount).to_integral_value(rounding=ROUND_FLOOR))


def normalize_payment_method(payment_method: str | None) -> str:
    """Lower-cased free text; cash, credit and debit are the usual values."""
    if payment_method is not None and not isinstance(payment_method, str):
        raise ValidationError("payment_method must be a string")
    method = (payment_method or "").strip().lower()
    if not method:
        raise ValidationError("payment_method is required")
    if len(method) > MAX_PAYMENT_METHOD_LENGTH:
        raise ValidationError(f"payment_method exceeds max length {MAX_PAYMENT_METHOD_LENGTH}")
    return method


def parse_tendered(amount_tendered) -> Decimal:
    """Exact Decimal from a JSON number or numeric string."""
    if isinstance(amount_tendered, bool) or not isinstance(amount_tendered, (int, float, Decimal, str)):
        raise ValidationError("amount_tendered must be a number")
    try:
        tendered = Decimal(str(amount_tendered).strip())
    except InvalidOperation:
        raise ValidationError("amount_tendered must be a number")
    if not tendered.is_finite():
        raise ValidationError("amount_tendered must be a number")
    return tendered


def build_cart(store: RecordStore, lines: Iterable[dict], now: datetime | None = None) -> Cart:
    """
    Price requested lines into a Cart.

    lines: [{"item_id": int, "quantity": int}]. Repeated item ids are merged.
    Prices come from the stored item and the promotions active at now.
    """
    now = now or utcnow()
    requested: dict[int, int] = {}
    for raw in lines or ():
        if not isinstance(raw, dict):
            raise ValidationError("Each line must be an object with item_id and quantity")
        item_id = raw.get("item_id")
        quantity = raw.get("quantity", 1)
        if isinstance(item_id, bool) or not isinstance(item_id, int):
            raise ValidationError("item_id must be an integer")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("quantity must be a positive integer", details={"item_id": item_id})
        requested[item_id] = requested.get(item_id, 0) + quantity

    promotions = get_active_promotions(store, now)
    cart = Cart()
    for item_id, quantity in requested.items():
        item = store.get("items", item_id)
        cart.add(item, promotions)
        if quantity > 1:
            cart.set_quantity(item_id, quantity)
    return cart


class CheckoutOrchestrator:
    """Runs checkouts against one record store."""

    def __init__(
        self,
        store: RecordStore,
        *,
        restock_on_failure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.restock_on_failure = restock_on_failure
        self.clock = clock

    # -- step 1 ------------------------------------------------------------

    def _validate(self, actor, cart, payment_method, amount, amount_tendered, customer_id) -> Decimal | None:
        if actor is None or not getattr(actor, "user_id", None):
            raise ValidationError("User not authenticated")

        if cart is None or cart.is_empty:
            raise ValidationError("Cart is empty")

        if amount < 0:
            raise ValidationError("Cart total cannot be negative", details={"total": amount})

        tendered = None
        if amount_tendered is not None:
            tendered = parse_tendered(amount_tendered)
            if tendered < amount:
                raise ValidationError(
                    "Amount paid must be greater than or equal to total",
                    details={"total": amount, "amount_tendered": tendered},
                )
        elif payment_method == PAYMENT_CASH:
            raise ValidationError("amount_tendered is required for cash payments")

        if customer_id is not None:
            self.store.get("customers", customer_id)

        short = []
        for line in cart:
            item = self.store.get("items", line.id)
            if item["quantity"] < line.quantity:
                short.append({
                    "item_id": line.id,
                    "requested_quantity": line.quantity,
                    "on_hand": item["quantity"],
                })
        if short:
            raise ValidationError("Insufficient inventory", details={"items": short})

        return tendered

    # -- step 3 failure path -----------------------------------------------

    def _compensate(self, attempt: CheckoutAttempt, failed_line, cause: Exception) -> None:
        txn_id = attempt.transaction_id

        cancel_recorded = True
        try:
            self.store.update("transactions", txn_id, {"status": STATUS_CANCELLED})
        except POSError as exc:
            cancel_recorded = False
            logger.error("Could not mark transaction %s cancelled: %s", txn_id, exc)

        restocked: list[Compensation] = []
        if self.restock_on_failure:
            for comp in reversed(attempt.pending_compensations):
                try:
                    self.store.increment("items", comp.item_id, {"quantity": comp.quantity})
                    restocked.append(comp)
                except POSError as exc:
                    logger.error(
                        "Could not restock item %s (+%s) for transaction %s: %s",
                        comp.item_id, comp.quantity, txn_id, exc,
                    )
            attempt.pending_compensations = [
                c for c in attempt.pending_compensations if c not in restocked
            ]

        attempt.advance(CheckoutState.CANCELLED)
        logger.warning(
            "Checkout of transaction %s cancelled: inventory update failed for item %s (%s)",
            txn_id, failed_line.id, cause,
        )
        raise PartialFailureError(
            f"Failed to update inventory: {cause}",
            transaction_id=txn_id,
            details={
                "failed_item_id": failed_line.id,
                "cancel_recorded": cancel_recorded,
                "restocked": [c.to_dict() for c in restocked],
                "pending_compensations": [c.to_dict() for c in attempt.pending_compensations],
            },
        ) from cause

    # -- step 4 ------------------------------------------------------------

    def _accrue_loyalty(self, transaction: dict) -> tuple[bool, str | None]:
        customer_id = transaction.get("customer_id")
        if customer_id is None or transaction.get("type") != TRANSACTION_SALE:
            return False, None

        amount = to_decimal(transaction["amount"])
        try:
            self.store.increment(
                "customers",
                customer_id,
                {"total_spent": amount, "loyalty_points": loyalty_points_for(amount)},
            )
        except POSError as exc:
            logger.error(
                "Loyalty accrual failed for customer %s on transaction %s: %s",
                customer_id, transaction.get("id"), exc,
            )
            return False, str(exc)
        return True, None

    # -- entry point -------------------------------------------------------

    def checkout(
        self,
        actor: SessionContext,
        cart: Cart,
        payment_method: str,
        amount_tendered=None,
        customer_id: int | None = None,
    ) -> CheckoutResult:
        """
        Run one checkout. The caller clears the cart after a completed result.

        Raises:
            ValidationError / NotFoundError: before anything is written
            PersistenceError: the transaction could not be saved (aborted)
            PartialFailureError: saved, then cancelled by a stock failure
        """
        attempt = CheckoutAttempt()

        method = normalize_payment_method(payment_method)
        amount = round_money(cart.total()) if cart is not None else Decimal("0")
        tendered = self._validate(actor, cart, method, amount, amount_tendered, customer_id)

        lines = list(cart)
        draft = {
            "type": TRANSACTION_SALE,
            "amount": amount,
            "status": STATUS_COMPLETED,
            "payment_method": method,
            # JSON column: store numbers, not Decimal
            "items": [
                {"id": line.id, "name": line.name, "quantity": line.quantity, "price": float(line.price)}
                for line in lines
            ],
            "customer_id": customer_id,
            "cashier_id": actor.user_id,
            "date": self.clock(),
        }

        attempt.advance(CheckoutState.SUBMITTING)
        try:
            transaction = self.store.insert("transactions", draft)
        except POSError:
            attempt.advance(CheckoutState.ABORTED)
            logger.exception("Failed to create transaction for cashier %s", actor.user_id)
            raise
        attempt.transaction_id = transaction["id"]

        for line in lines:
            try:
                self.store.decrement_stock(line.id, line.quantity)
            except POSError as exc:
                self._compensate(attempt, line, exc)
            attempt.pending_compensations.append(Compensation(line.id, line.quantity))

        loyalty_applied, loyalty_error = self._accrue_loyalty(transaction)

        attempt.advance(CheckoutState.COMPLETED)
        logger.info(
            "Transaction %s completed: %s via %s by cashier %s",
            transaction["id"], amount, method, actor.user_id,
        )
        return CheckoutResult(
            state=attempt.state,
            transaction=transaction,
            change_due=(tendered - amount) if tendered is not None else Decimal("0.00"),
            loyalty_applied=loyalty_applied,
            loyalty_error=loyalty_error,
        )
