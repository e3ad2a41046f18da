from __future__ import annotations

from decimal import Decimal

from ..repositories import RecordStore
from ..validation import validate_customer

MIN_SEARCH_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10
CUSTOMER_SEARCH_FIELDS = ("name", "phone", "email")


def _with_defaults(customer: dict) -> dict:
    # Rows written outside the app may carry NULL counters
    customer["loyalty_points"] = customer.get("loyalty_points") or 0
    customer["total_spent"] = customer.get("total_spent") or Decimal("0")
    return customer


def list_customers(store: RecordStore) -> list[dict]:
    return [_with_defaults(c) for c in store.select("customers", order_by="name")]


def search_customers(store: RecordStore, query: str | None, limit: int = DEFAULT_SEARCH_LIMIT) -> list[dict]:
    """
    Case-insensitive substring match on name, phone or email, ordered by name.

    Queries shorter than two characters return nothing.
    """
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    rows = store.select(
        "customers",
        search=(CUSTOMER_SEARCH_FIELDS, term),
        order_by="name",
        limit=limit,
    )
    return [_with_defaults(c) for c in rows]


def get_customer(store: RecordStore, customer_id: int) -> dict:
    return _with_defaults(store.get("customers", customer_id))


def create_customer(store: RecordStore, data: dict) -> dict:
    patch = validate_customer(data)
    patch["loyalty_points"] = 0
    patch["total_spent"] = Decimal("0")
    return store.insert("customers", patch)


def update_customer(store: RecordStore, customer_id: int, data: dict) -> dict:
    patch = validate_customer(data, partial=True)
    if not patch:
        return get_customer(store, customer_id)
    return _with_defaults(store.update("customers", customer_id, patch))


def delete_customer(store: RecordStore, customer_id: int) -> None:
    store.delete("customers", customer_id)
