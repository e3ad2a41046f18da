from __future__ import annotations

from ..extensions import db


class Item(db.Model):
    """
    Sellable stock item (a bottle, a six-pack, a carton).

    BARCODE: unique external code scanned at the register.
    QUANTITY: units on hand. Checkout decrements it conditionally so it never
    drops below zero; manual adjustment sets it outright.

    Items are never deleted through the API.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.UniqueConstraint("barcode", name="uq_items_barcode"),
        db.Index("ix_items_name", "name"),
        db.Index("ix_items_rank", "rank"),
        db.CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    barcode = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    case_quantity = db.Column(db.Integer, nullable=False, default=0)

    price = db.Column(db.Numeric(12, 2), nullable=False)
    average_cost = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    margin = db.Column(db.Numeric(6, 2), nullable=False, default=0)  # percent

    size = db.Column(db.String(64), nullable=False)
    category = db.Column(db.String(128), nullable=False)
    supplier = db.Column(db.String(255), nullable=False)

    units_per_case = db.Column(db.Integer, nullable=False, default=1)
    case_cost = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Display ordering on the register
    rank = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Item id={self.id} barcode={self.barcode!r} name={self.name!r} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barcode": self.barcode,
            "name": self.name,
            "quantity": self.quantity,
            "case_quantity": self.case_quantity,
            "price": self.price,
            "average_cost": self.average_cost,
            "margin": self.margin,
            "size": self.size,
            "category": self.category,
            "supplier": self.supplier,
            "units_per_case": self.units_per_case,
            "case_cost": self.case_cost,
            "rank": self.rank,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
