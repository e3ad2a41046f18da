# Overview: Promotion-adjusted unit pricing for the register.

"""
Pricing Engine

A promotion applies to an item when the item's name appears in the
promotion's comma-separated applicable_items list (entries trimmed, exact
case-sensitive match). Matching promotions are applied in the order given:

- percentage: price * (1 - value / 100)
- fixed:      price - value

Nothing is rounded between steps and nothing floors the result, so stacked
fixed discounts can take a price below zero. Rounding happens only when an
amount is charged or displayed.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

PROMO_PERCENTAGE = "percentage"
PROMO_FIXED = "fixed"
PROMOTION_TYPES = (PROMO_PERCENTAGE, PROMO_FIXED)

HUNDRED = Decimal("100")


def field(record: Any, name: str, default=None):
    """Read a field from a record-store row (dict) or a model/dataclass."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    # str() keeps 0.1 as 0.1 instead of the binary float expansion
    return Decimal(str(value))


def applicable_item_names(promotion) -> list[str]:
    raw = field(promotion, "applicable_items") or ""
    return [name.strip() for name in raw.split(",") if name.strip()]


def promotion_applies(promotion, item_name: str) -> bool:
    return item_name in applicable_item_names(promotion)


def is_promotion_active(promotion, now: datetime) -> bool:
    """
    True when now falls inside [start_date, end_date], both ends inclusive.

    Date-only bounds cover the whole calendar day.
    """
    start = field(promotion, "start_date")
    end = field(promotion, "end_date")
    if start is None or end is None:
        return False

    def _point(bound):
        if isinstance(bound, datetime):
            return now
        if isinstance(bound, date):
            return now.date()
        raise TypeError(f"Unsupported promotion bound: {bound!r}")

    return start <= _point(start) and _point(end) <= end


def active_promotions(promotions: Iterable, now: datetime) -> list:
    return [p for p in promotions if is_promotion_active(p, now)]


def apply_promotion(price: Decimal, promotion) -> Decimal:
    promo_type = field(promotion, "type")
    value = to_decimal(field(promotion, "value"))
    if promo_type == PROMO_PERCENTAGE:
        return price * (1 - value / HUNDRED)
    if promo_type == PROMO_FIXED:
        return price - value
    # Unknown types are ignored rather than guessed at
    return price


def compute_price(item, active_promotions: Iterable) -> Decimal:
    """Effective unit price of item under the given active promotions."""
    price = to_decimal(field(item, "price"))
    name = field(item, "name")
    for promotion in active_promotions:
        if promotion_applies(promotion, name):
            price = apply_promotion(price, promotion)
    return price
