# Overview: Service-layer operations for the dashboard; read-only aggregates over the record store.

"""
Dashboard metrics

Only completed sales count toward revenue and sales figures. Windows:
- month:          (now - 1 month, now]
- previous month: (now - 2 months, now - 1 month]
- last hour:      (now - 1 hour, now]

Revenue change is the percent change from the previous month window, 0 when
the previous window had no revenue.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from decimal import Decimal

from ..repositories import RecordStore
from ..time_utils import utcnow
from .pricing import to_decimal

MONTH_NAMES = [calendar.month_abbr[i] for i in range(1, 13)]

GUEST_CUSTOMER = {"name": "Guest", "email": "guest@example.com"}

RECENT_SALES_LIMIT = 5
LOW_STOCK_LIMIT = 5

COMPLETED_SALES = [("type", "eq", "sale"), ("status", "eq", "completed")]


def months_before(dt: datetime, months: int) -> datetime:
    """Same day and time `months` calendar months earlier, clamped to month end."""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def _sum_amounts(rows) -> Decimal:
    return sum((to_decimal(r.get("amount")) for r in rows), Decimal("0"))


def get_metrics(store: RecordStore, now: datetime | None = None) -> dict:
    now = now or utcnow()
    month_start = months_before(now, 1)
    previous_start = months_before(now, 2)
    hour_start = now - timedelta(hours=1)

    sales = store.select(
        "transactions",
        COMPLETED_SALES + [("date", "gt", previous_start), ("date", "lte", now)],
    )
    current = [s for s in sales if s["date"] > month_start]
    previous = [s for s in sales if s["date"] <= month_start]

    current_revenue = _sum_amounts(current)
    previous_revenue = _sum_amounts(previous)
    if previous_revenue:
        revenue_change = (current_revenue - previous_revenue) / previous_revenue * 100
    else:
        revenue_change = Decimal("0")

    inventory_value = sum(
        (to_decimal(i.get("quantity") or 0) * to_decimal(i.get("average_cost")) for i in store.select("items")),
        Decimal("0"),
    )

    return {
        "revenue": {
            "total": current_revenue,
            "change": revenue_change.quantize(Decimal("0.01")),
        },
        "inventory": {"value": inventory_value},
        "sales": {
            "total": len(current),
            "last_hour": sum(1 for s in current if s["date"] > hour_start),
        },
        "customers": {"total": len(store.select("customers"))},
    }


def get_monthly_sales(store: RecordStore, now: datetime | None = None) -> list[dict]:
    """Completed sale totals per calendar month of the current year, Jan..Dec."""
    now = now or utcnow()
    start_of_year = datetime(now.year, 1, 1)
    months = [{"name": name, "total": Decimal("0")} for name in MONTH_NAMES]

    rows = store.select(
        "transactions",
        COMPLETED_SALES + [("date", "gte", start_of_year), ("date", "lte", now)],
    )
    for row in rows:
        months[row["date"].month - 1]["total"] += to_decimal(row.get("amount"))
    return months


def get_recent_sales(store: RecordStore, limit: int = RECENT_SALES_LIMIT) -> list[dict]:
    rows = store.select("transactions", COMPLETED_SALES, order_by="date", descending=True, limit=limit)

    customer_ids = sorted({r["customer_id"] for r in rows if r.get("customer_id") is not None})
    customers = {}
    if customer_ids:
        customers = {c["id"]: c for c in store.select("customers", [("id", "in", customer_ids)])}

    recent = []
    for row in rows:
        customer = customers.get(row.get("customer_id"))
        recent.append({
            "id": row["id"],
            "amount": row.get("amount") or Decimal("0"),
            "date": row["date"],
            "customer": (
                {"name": customer["name"], "email": customer.get("email")}
                if customer else dict(GUEST_CUSTOMER)
            ),
        })
    return recent


def get_low_stock(store: RecordStore, threshold: int, limit: int = LOW_STOCK_LIMIT) -> list[dict]:
    rows = store.select("items", [("quantity", "lt", threshold)], order_by="quantity", limit=limit)
    return [{"id": r["id"], "name": r["name"], "quantity": r["quantity"]} for r in rows]
