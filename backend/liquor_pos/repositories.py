# Overview: Record store contract and its SQLAlchemy implementation.

"""
Record Store

Table-oriented CRUD over items, customers, transactions, promotions and users.
Rows go in and come out as plain dicts, so pricing, cart and checkout logic
never touch the ORM and can run against any implementation of the contract.

FILTERS: a sequence of (field, op, value) tuples, AND-ed together.
    op is one of eq, ne, lt, lte, gt, gte, in, contains.
    "contains" is a case-insensitive substring match.
SEARCH: (fields, term), a case-insensitive substring match OR-ed across fields.

ARITHMETIC: increment() and decrement_stock() are evaluated by the database
(UPDATE ... SET col = col + :delta), never read-modify-write in Python.
decrement_stock() is conditional: it refuses to take quantity below zero.
"""

from __future__ import annotations

import logging
import operator
from contextlib import contextmanager
from typing import Any, Iterable, Sequence

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import (
    DuplicateError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .extensions import db
from .models import Customer, Item, Promotion, Transaction, User

logger = logging.getLogger(__name__)

TABLES = ("items", "customers", "transactions", "promotions", "users")

# Fields that may still change once a row exists
MUTABLE_AFTER_INSERT = {
    "transactions": {"status"},
}

FILTER_OPS = ("eq", "ne", "lt", "lte", "gt", "gte", "in", "contains")

Filter = tuple[str, str, Any]


class RecordStore:
    """Contract every record store implements."""

    def select(
        self,
        table: str,
        filters: Iterable[Filter] | None = None,
        *,
        search: tuple[Sequence[str], str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        raise NotImplementedError

    def get(self, table: str, row_id: int) -> dict:
        """Return the row or raise NotFoundError."""
        raise NotImplementedError

    def insert(self, table: str, row: dict) -> dict:
        raise NotImplementedError

    def update(self, table: str, row_id: int, patch: dict) -> dict:
        raise NotImplementedError

    def delete(self, table: str, row_id: int) -> None:
        raise NotImplementedError

    def increment(self, table: str, row_id: int, deltas: dict) -> dict:
        """Add each delta to its column atomically and return the new row."""
        raise NotImplementedError

    def decrement_stock(self, item_id: int, quantity: int) -> dict:
        """
        Take quantity units off an item's stock.

        Raises InsufficientStockError instead of going below zero, and
        NotFoundError for an unknown item.
        """
        raise NotImplementedError


def check_mutable(table: str, patch: dict) -> None:
    allowed = MUTABLE_AFTER_INSERT.get(table)
    if allowed is None:
        return
    frozen = sorted(k for k in patch if k not in allowed)
    if frozen:
        raise ValidationError(
            f"{table} rows are immutable except {', '.join(sorted(allowed))}",
            details={"fields": frozen},
        )


def check_filter_op(op: str) -> None:
    if op not in FILTER_OPS:
        raise ValidationError(f"Unsupported filter operator: {op}")


_COMPARE = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlRecordStore(RecordStore):
    """Record store backed by the Flask-SQLAlchemy session."""

    MODELS = {
        "items": Item,
        "customers": Customer,
        "transactions": Transaction,
        "promotions": Promotion,
        "users": User,
    }

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # -- helpers -----------------------------------------------------------

    def _model(self, table: str):
        model = self.MODELS.get(table)
        if model is None:
            raise ValidationError(f"Unknown table: {table}")
        return model

    @staticmethod
    def _column(model, field: str):
        column = model.__table__.columns.get(field)
        if column is None:
            raise ValidationError(f"Unknown field: {field}")
        return getattr(model, column.key)

    def _condition(self, model, field: str, op: str, value: Any):
        check_filter_op(op)
        col = self._column(model, field)
        if op == "in":
            return col.in_(list(value))
        if op == "contains":
            return col.ilike(_like_pattern(str(value)), escape="\\")
        return _COMPARE[op](col, value)

    def _load(self, model, row_id: int, table: str):
        obj = self.session.get(model, row_id)
        if obj is None:
            raise NotFoundError(f"{table} row {row_id} not found", details={"id": row_id})
        return obj

    @contextmanager
    def _translate_errors(self, action: str):
        try:
            yield
        except IntegrityError as exc:
            self.session.rollback()
            message = str(exc.orig).lower()
            if "unique" in message or "duplicate" in message:
                raise DuplicateError(f"Cannot {action}: value already exists") from exc
            raise ValidationError(f"Cannot {action}: constraint violated") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Record store failed to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc

    # -- contract ----------------------------------------------------------

    def select(self, table, filters=None, *, search=None, order_by=None, descending=False, limit=None):
        model = self._model(table)
        query = self.session.query(model)

        for field, op, value in filters or ():
            query = query.filter(self._condition(model, field, op, value))

        if search is not None:
            fields, term = search
            pattern = _like_pattern(term)
            query = query.filter(or_(*[
                self._column(model, f).ilike(pattern, escape="\\") for f in fields
            ]))

        if order_by:
            col = self._column(model, order_by)
            query = query.order_by(col.desc() if descending else col.asc(), model.id.asc())
        else:
            query = query.order_by(model.id.asc())

        if limit is not None:
            query = query.limit(limit)

        with self._translate_errors(f"select from {table}"):
            return [obj.to_dict() for obj in query.all()]

    def get(self, table, row_id):
        model = self._model(table)
        with self._translate_errors(f"read {table} row"):
            return self._load(model, row_id, table).to_dict()

    def insert(self, table, row):
        model = self._model(table)
        columns = model.__table__.columns
        unknown = sorted(k for k in row if k not in columns)
        if unknown:
            raise ValidationError(f"Unknown fields for {table}: {', '.join(unknown)}")

        with self._translate_errors(f"insert into {table}"):
            obj = model(**row)
            self.session.add(obj)
            self.session.commit()
            return obj.to_dict()

    def update(self, table, row_id, patch):
        model = self._model(table)
        check_mutable(table, patch)
        columns = model.__table__.columns
        unknown = sorted(k for k in patch if k not in columns or k == "id")
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(unknown)}")

        with self._translate_errors(f"update {table} row"):
            obj = self._load(model, row_id, table)
            for key, value in patch.items():
                setattr(obj, key, value)
            self.session.commit()
            return obj.to_dict()

    def delete(self, table, row_id):
        model = self._model(table)
        with self._translate_errors(f"delete {table} row"):
            obj = self._load(model, row_id, table)
            self.session.delete(obj)
            self.session.commit()

    def increment(self, table, row_id, deltas):
        model = self._model(table)
        check_mutable(table, deltas)
        values = {}
        for field, delta in deltas.items():
            col = self._column(model, field)
            values[col.key] = col + delta

        with self._translate_errors(f"increment {table} row"):
            result = self.session.execute(
                update(model).where(model.id == row_id).values(values)
            )
            if result.rowcount == 0:
                self.session.rollback()
                raise NotFoundError(f"{table} row {row_id} not found", details={"id": row_id})
            self.session.commit()
            return self._load(model, row_id, table).to_dict()

    def decrement_stock(self, item_id, quantity):
        if quantity <= 0:
            raise ValidationError("quantity must be > 0")

        with self._translate_errors("decrement item stock"):
            result = self.session.execute(
                update(Item)
                .where(Item.id == item_id, Item.quantity >= quantity)
                .values(quantity=Item.quantity - quantity)
            )
            if result.rowcount == 0:
                self.session.rollback()
                item = self._load(Item, item_id, "items")
                raise InsufficientStockError(
                    f"Insufficient stock for {item.name}",
                    details={"item_id": item_id, "requested": quantity, "on_hand": item.quantity},
                )
            self.session.commit()
            return self._load(Item, item_id, "items").to_dict()


def get_record_store() -> RecordStore:
    """Record store bound to the current Flask-SQLAlchemy session."""
    return SqlRecordStore(db.session)
