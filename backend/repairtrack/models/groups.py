from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class OrderGroup(db.Model):
    """
    Bundle of orders sharing a distributed cost (e.g. one courier shipment).

    Members are linked through order.group_id; an order belongs to at most one
    group.
    """
    __tablename__ = "order_groups"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    orders = db.relationship("Order", back_populates="group", order_by="Order.created_at", lazy="selectin")
    expenses = db.relationship(
        "GroupExpense",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupExpense.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<OrderGroup id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
            "orders": [o.to_dict() for o in self.orders],
            "expenses": [e.to_dict() for e in self.expenses],
            "total_expenses": sum(e.amount for e in self.expenses),
        }


class GroupExpense(db.Model):
    __tablename__ = "group_expenses"
    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_group_expenses_amount_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey("order_groups.id"), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    group = db.relationship("OrderGroup", back_populates="expenses")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "description": self.description,
            "amount": self.amount,
            "created_at": to_utc_z(self.created_at),
        }
