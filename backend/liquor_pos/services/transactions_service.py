# Overview: Service-layer operations for transaction history.

from __future__ import annotations

from ..errors import ValidationError
from ..repositories import RecordStore
from ..time_utils import parse_iso_datetime

TRANSACTION_TYPES = ("sale", "refund")
TRANSACTION_STATUSES = ("completed", "pending", "cancelled")


def _parse_bound(name: str, value: str | None):
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 datetime")


def _attach_names(store: RecordStore, transactions: list[dict]) -> list[dict]:
    """Add cashier_username and customer_name from two batched lookups."""
    cashier_ids = {t["cashier_id"] for t in transactions if t.get("cashier_id") is not None}
    customer_ids = {t["customer_id"] for t in transactions if t.get("customer_id") is not None}

    cashiers = {}
    if cashier_ids:
        cashiers = {u["id"]: u for u in store.select("users", [("id", "in", sorted(cashier_ids))])}
    customers = {}
    if customer_ids:
        customers = {c["id"]: c for c in store.select("customers", [("id", "in", sorted(customer_ids))])}

    for t in transactions:
        cashier = cashiers.get(t.get("cashier_id"))
        customer = customers.get(t.get("customer_id"))
        t["cashier_username"] = cashier["username"] if cashier else None
        # deleted customers leave a dangling id; report them as unnamed
        t["customer_name"] = customer["name"] if customer else None
    return transactions


def list_transactions(
    store: RecordStore,
    *,
    start: str | None = None,
    end: str | None = None,
    type: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[dict]:
    """
    Transactions newest first.

    start/end are inclusive ISO-8601 bounds on the transaction date.
    """
    filters = []

    start_dt = _parse_bound("from", start)
    end_dt = _parse_bound("to", end)
    if start_dt is not None:
        filters.append(("date", "gte", start_dt))
    if end_dt is not None:
        filters.append(("date", "lte", end_dt))

    if type:
        if type not in TRANSACTION_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(TRANSACTION_TYPES)}")
        filters.append(("type", "eq", type))
    if status:
        if status not in TRANSACTION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(TRANSACTION_STATUSES)}")
        filters.append(("status", "eq", status))

    rows = store.select("transactions", filters, order_by="date", descending=True, limit=limit)
    return _attach_names(store, rows)


def get_transaction(store: RecordStore, transaction_id: int) -> dict:
    row = store.get("transactions", transaction_id)
    return _attach_names(store, [row])[0]
