from __future__ import annotations

from datetime import datetime

from ..repositories import RecordStore
from ..time_utils import utcnow
from ..validation import validate_promotion
from .pricing import is_promotion_active


def list_promotions(store: RecordStore, active_only: bool = False, now: datetime | None = None) -> list[dict]:
    if active_only:
        return get_active_promotions(store, now)
    return store.select("promotions", order_by="start_date", descending=True)


def get_active_promotions(store: RecordStore, now: datetime | None = None) -> list[dict]:
    """Promotions whose date window contains now, oldest first so stacking order is stable."""
    now = now or utcnow()
    today = now.date()
    candidates = store.select(
        "promotions",
        [("start_date", "lte", today), ("end_date", "gte", today)],
        order_by="id",
    )
    return [p for p in candidates if is_promotion_active(p, now)]


def get_promotion(store: RecordStore, promo_id: int) -> dict:
    return store.get("promotions", promo_id)


def create_promotion(store: RecordStore, data: dict) -> dict:
    patch = validate_promotion(data)
    return store.insert("promotions", patch)


def update_promotion(store: RecordStore, promo_id: int, data: dict) -> dict:
    existing = store.get("promotions", promo_id)
    patch = validate_promotion(data, partial=True, existing=existing)
    if not patch:
        return existing
    return store.update("promotions", promo_id, patch)


def delete_promotion(store: RecordStore, promo_id: int) -> None:
    store.delete("promotions", promo_id)
