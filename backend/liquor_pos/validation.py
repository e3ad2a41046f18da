from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from liquor_pos.time_utils import parse_iso_datetime

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .models import Customer, Item, Promotion
from .services.pricing import PROMOTION_TYPES


# Maximum price: $9,999,999.99
# Numeric(12, 2) columns hold more, but nothing sold here costs that
MAX_PRICE = Decimal("9999999.99")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = frozenset()  # type: ignore


ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "barcode", "name", "quantity", "case_quantity", "price", "average_cost",
        "margin", "size", "category", "supplier", "units_per_case", "case_cost", "rank",
    },
    required_on_create={
        "barcode", "name", "quantity", "price", "average_cost",
        "size", "category", "supplier", "units_per_case", "case_cost",
    },
)

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "email"},
    required_on_create={"name", "phone"},
)

PROMOTION_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "type", "value", "start_date", "end_date", "applicable_items", "quantity_needed",
    },
    required_on_create={"name", "type", "value", "start_date", "end_date"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Money and percentages: numbers or numeric strings, kept exact
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        if isinstance(value, (int, float, Decimal)) or isinstance(value, str):
            try:
                number = Decimal(str(value).strip())
            except InvalidOperation:
                raise ValidationError(f"{col.key} must be a number")
            if not number.is_finite():
                raise ValidationError(f"{col.key} must be a finite number")
            return number
        raise ValidationError(f"{col.key} must be a number")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Calendar dates: "YYYY-MM-DD", or a full timestamp whose date part is used
    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            try:
                return date.fromisoformat(stripped)
            except ValueError:
                pass
            try:
                dt = parse_iso_datetime(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return dt.date()
        raise ValidationError(f"{col.key} must be a date")

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                details={"missing": missing},
            )

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable and k in policy.required_on_create:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_item(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for key in ("price", "average_cost", "case_cost"):
        value = patch.get(key)
        if value is None:
            continue
        if value < 0:
            raise ValidationError(f"{key} must be >= 0")
        if value > MAX_PRICE:
            raise ValidationError(f"{key} cannot exceed {MAX_PRICE}")

    for key in ("quantity", "case_quantity"):
        if patch.get(key) is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")

    if patch.get("units_per_case") is not None and patch["units_per_case"] < 1:
        raise ValidationError("units_per_case must be >= 1")


def enforce_rules_promotion(patch: dict, existing: dict | None = None) -> None:
    if "type" in patch:
        promo_type = (patch["type"] or "").lower()
        if promo_type not in PROMOTION_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(PROMOTION_TYPES)}")
        patch["type"] = promo_type

    value = patch.get("value")
    if value is not None and value < 0:
        raise ValidationError("value must be >= 0")

    promo_type = patch.get("type") or (existing or {}).get("type")
    if promo_type == "percentage" and value is not None and value > 100:
        raise ValidationError("percentage value cannot exceed 100")

    if patch.get("quantity_needed") is not None and patch["quantity_needed"] < 1:
        raise ValidationError("quantity_needed must be >= 1")

    start = patch.get("start_date", (existing or {}).get("start_date"))
    end = patch.get("end_date", (existing or {}).get("end_date"))
    if start is not None and end is not None and end < start:
        raise ValidationError("end_date must be on or after start_date")


def validate_item(payload: dict, *, partial: bool = False) -> dict:
    patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=partial)
    enforce_rules_item(patch)
    return patch


def validate_customer(payload: dict, *, partial: bool = False) -> dict:
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=partial)
    if "email" in patch and patch["email"] == "":
        patch["email"] = None
    return patch


def validate_promotion(payload: dict, *, partial: bool = False, existing: dict | None = None) -> dict:
    patch = validate_payload(model=Promotion, payload=payload, policy=PROMOTION_POLICY, partial=partial)
    enforce_rules_promotion(patch, existing)
    return patch
