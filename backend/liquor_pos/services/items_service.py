# Overview: Service-layer operations for items; catalog reads, edits and stock adjustment.

# backend/liquor_pos/services/items_service.py

"""
Items Service

Invariants:
- Items are never deleted through the API.
- quantity only changes through checkout (conditional decrement) or a manual
  adjustment here. The adjustment sets the counted quantity; it is not a delta.
- Barcodes are unique; a clash surfaces as DuplicateError from the store.
"""
from __future__ import annotations

import logging

from ..errors import NotFoundError, ValidationError
from ..repositories import RecordStore
from ..validation import validate_item

logger = logging.getLogger(__name__)

ITEM_ORDERINGS = ("name", "rank")
ITEM_SEARCH_FIELDS = ("name", "barcode", "category", "supplier")

DEFAULT_LOW_STOCK_THRESHOLD = 10


def list_items(store: RecordStore, query: str | None = None, order_by: str = "name") -> list[dict]:
    """
    All items, optionally narrowed by a case-insensitive substring search.

    order_by="rank" lists best sellers first.
    """
    if order_by not in ITEM_ORDERINGS:
        raise ValidationError(f"order_by must be one of: {', '.join(ITEM_ORDERINGS)}")

    search = None
    if query and query.strip():
        search = (ITEM_SEARCH_FIELDS, query.strip())

    return store.select("items", search=search, order_by=order_by, descending=(order_by == "rank"))


def get_item(store: RecordStore, item_id: int) -> dict:
    return store.get("items", item_id)


def get_item_by_barcode(store: RecordStore, barcode: str) -> dict:
    rows = store.select("items", [("barcode", "eq", (barcode or "").strip())], limit=1)
    if not rows:
        raise NotFoundError("Item not found", details={"barcode": barcode})
    return rows[0]


def create_item(store: RecordStore, data: dict) -> dict:
    patch = validate_item(data)
    item = store.insert("items", patch)
    logger.info("Created item %s barcode=%s name=%s", item["id"], item["barcode"], item["name"])
    return item


def update_item(store: RecordStore, item_id: int, data: dict) -> dict:
    patch = validate_item(data, partial=True)
    if not patch:
        return store.get("items", item_id)
    return store.update("items", item_id, patch)


def adjust_quantity(store: RecordStore, item_id: int, quantity) -> dict:
    """Set an item's on-hand quantity to a counted value."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")

    before = store.get("items", item_id)
    item = store.update("items", item_id, {"quantity": quantity})
    logger.info("Adjusted item %s quantity %s -> %s", item_id, before["quantity"], quantity)
    return item


def low_stock_items(
    store: RecordStore,
    threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    limit: int | None = None,
) -> list[dict]:
    """Items with quantity strictly below threshold, lowest stock first."""
    return store.select(
        "items",
        [("quantity", "lt", threshold)],
        order_by="quantity",
        limit=limit,
    )
