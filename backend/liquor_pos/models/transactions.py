from __future__ import annotations

from ..extensions import db


class Transaction(db.Model):
    """
    Completed register transaction.

    items is a denormalized snapshot of the cart at checkout
    ([{id, name, quantity, price}]); it is a historical record, not a live
    reference to Item rows, and is never rewritten. After creation only
    status may change (completed -> cancelled on a failed inventory step).
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_date", "date"),
        db.Index("ix_transactions_type_status_date", "type", "status", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False)

    type = db.Column(db.String(16), nullable=False, default="sale")  # sale, refund
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="completed")  # completed, pending, cancelled
    payment_method = db.Column(db.String(32), nullable=False)

    items = db.Column(db.JSON, nullable=False, default=list)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    cashier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True, passive_deletes=True))
    cashier = db.relationship("User", backref=db.backref("transactions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "type": self.type,
            "amount": self.amount,
            "status": self.status,
            "payment_method": self.payment_method,
            "items": [dict(line) for line in (self.items or [])],
            "customer_id": self.customer_id,
            "cashier_id": self.cashier_id,
        }
