"""
Pricing tests.

Verifies:
- Promotions match by exact item name in a comma-separated list
- Percentage and fixed discounts stack in order without rounding or a floor
- The active window is inclusive at both ends
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from liquor_pos.services.pricing import (
    active_promotions,
    applicable_item_names,
    compute_price,
    is_promotion_active,
)


ITEM = {"id": 1, "name": "Beer", "price": Decimal("20.00")}


def promo(type_, value, items="Beer", start=date(2026, 1, 1), end=date(2026, 1, 31)):
    return {
        "name": f"{type_} {value}",
        "type": type_,
        "value": Decimal(str(value)),
        "applicable_items": items,
        "start_date": start,
        "end_date": end,
    }


class TestComputePrice:
    def test_no_promotions_keeps_base_price(self):
        assert compute_price(ITEM, []) == Decimal("20.00")

    def test_percentage_discount(self):
        assert compute_price(ITEM, [promo("percentage", 10)]) == Decimal("18.00")

    def test_fixed_discounts_stack_below_zero(self):
        item = {"id": 2, "name": "Beer", "price": Decimal("7.00")}
        price = compute_price(item, [promo("fixed", 5), promo("fixed", 5)])
        assert price == Decimal("-3.00")

    def test_discounts_apply_in_collection_order(self):
        pct_then_fixed = compute_price(ITEM, [promo("percentage", 50), promo("fixed", 5)])
        fixed_then_pct = compute_price(ITEM, [promo("fixed", 5), promo("percentage", 50)])
        assert pct_then_fixed == Decimal("5")
        assert fixed_then_pct == Decimal("7.5")

    def test_no_intermediate_rounding(self):
        item = {"id": 3, "name": "Beer", "price": Decimal("9.99")}
        price = compute_price(item, [promo("percentage", 15)])
        assert price == Decimal("8.4915")

    def test_name_match_is_exact_and_case_sensitive(self):
        assert compute_price(ITEM, [promo("percentage", 10, items="beer")]) == Decimal("20.00")
        assert compute_price(ITEM, [promo("percentage", 10, items="Beer Light")]) == Decimal("20.00")

    def test_applicable_items_are_trimmed(self):
        p = promo("fixed", 1, items=" Wine ,Beer , ")
        assert applicable_item_names(p) == ["Wine", "Beer"]
        assert compute_price(ITEM, [p]) == Decimal("19.00")

    def test_unknown_promotion_type_is_ignored(self):
        assert compute_price(ITEM, [promo("bogo", 1)]) == Decimal("20.00")

    def test_accepts_objects_as_well_as_rows(self):
        class Row:
            name = "Beer"
            price = 20
        assert compute_price(Row(), [promo("percentage", 25)]) == Decimal("15")


class TestPromotionWindow:
    @pytest.mark.parametrize(
        "now,expected",
        [
            (datetime(2025, 12, 31, 23, 59), False),
            (datetime(2026, 1, 1, 0, 0), True),
            (datetime(2026, 1, 15, 12, 0), True),
            (datetime(2026, 1, 31, 23, 59), True),
            (datetime(2026, 2, 1, 0, 0), False),
        ],
    )
    def test_date_bounds_are_inclusive_by_day(self, now, expected):
        assert is_promotion_active(promo("fixed", 1), now) is expected

    def test_datetime_bounds_compare_exactly(self):
        p = promo("fixed", 1, start=datetime(2026, 1, 1, 9, 0), end=datetime(2026, 1, 1, 17, 0))
        assert is_promotion_active(p, datetime(2026, 1, 1, 9, 0))
        assert not is_promotion_active(p, datetime(2026, 1, 1, 17, 1))

    def test_active_promotions_filters(self):
        live = promo("fixed", 1)
        expired = promo("fixed", 2, start=date(2025, 1, 1), end=date(2025, 1, 31))
        assert active_promotions([live, expired], datetime(2026, 1, 10)) == [live]
