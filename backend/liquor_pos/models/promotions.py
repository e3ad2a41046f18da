from __future__ import annotations

from ..extensions import db


class Promotion(db.Model):
    """
    Price promotions.

    type: "percentage" (value is percent off) or "fixed" (value is currency off).
    applicable_items: comma-separated item names, matched by exact name.
    quantity_needed is recorded for display; pricing does not enforce it.
    Active while start_date <= today <= end_date (both inclusive).
    """
    __tablename__ = "promotions"
    __table_args__ = (
        db.Index("ix_promotions_window", "start_date", "end_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)  # percentage, fixed
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    applicable_items = db.Column(db.Text, nullable=False, default="")
    quantity_needed = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "applicable_items": self.applicable_items,
            "quantity_needed": self.quantity_needed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
