from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z, utcnow


class Order(db.Model):
    """
    A customer's repair order.

    MONEY FIELDS:
    - total_price: what the store charges the customer
    - hub_price: what the hub charges the store (hub actor only, None until set)
    - expense: store-side cost such as shipping (None until set)
    - advance_amount / balance_paid: deposit at intake and later payment

    WORKFLOW:
    - status is a stage token from the configured pipeline; the column is not
      an enum because the pipeline is deployment configuration
    - is_completed may only be true while status is the final stage

    Concurrent edits to the same order are last-write-wins; there is no
    version column.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("store_id", "serial_number", name="uq_orders_store_serial"),
        db.CheckConstraint("total_price >= 0", name="ck_orders_total_price_nonneg"),
        db.CheckConstraint("hub_price IS NULL OR hub_price >= 0", name="ck_orders_hub_price_nonneg"),
        db.CheckConstraint("expense IS NULL OR expense >= 0", name="ck_orders_expense_nonneg"),
        db.CheckConstraint("advance_amount >= 0", name="ck_orders_advance_nonneg"),
        db.CheckConstraint("balance_paid >= 0", name="ck_orders_balance_paid_nonneg"),
        db.Index("ix_orders_store_created", "store_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True)
    serial_number = db.Column(db.String(32), nullable=False)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    group_id = db.Column(db.Integer, db.ForeignKey("order_groups.id"), nullable=True, index=True)

    customer_name = db.Column(db.String(255), nullable=False)
    whatsapp_number = db.Column(db.String(32), nullable=False)

    shoe_model = db.Column(db.String(255), nullable=False)
    shoe_size = db.Column(db.String(32), nullable=True)
    shoe_color = db.Column(db.String(64), nullable=True)

    custom_complaint = db.Column(db.Text, nullable=True)
    is_price_unknown = db.Column(db.Boolean, nullable=False, default=False)
    is_free = db.Column(db.Boolean, nullable=False, default=False)
    expected_return_date = db.Column(db.Date, nullable=True)

    total_price = db.Column(db.Float, nullable=False, default=0.0)
    hub_price = db.Column(db.Float, nullable=True)
    expense = db.Column(db.Float, nullable=True)
    advance_amount = db.Column(db.Float, nullable=False, default=0.0)
    payment_method = db.Column(db.String(32), nullable=True)
    balance_paid = db.Column(db.Float, nullable=False, default=0.0)
    balance_payment_method = db.Column(db.String(32), nullable=True)

    status = db.Column(db.String(32), nullable=False, index=True)
    is_completed = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_in_house = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    store = db.relationship("Store", backref=db.backref("orders", lazy=True))
    group = db.relationship("OrderGroup", back_populates="orders")
    complaints = db.relationship(
        "OrderComplaint",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderComplaint.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} serial={self.serial_number!r} status={self.status!r}>"

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "serial_number": self.serial_number,
            "store_id": self.store_id,
            "group_id": self.group_id,
            "customer_name": self.customer_name,
            "whatsapp_number": self.whatsapp_number,
            "shoe_model": self.shoe_model,
            "shoe_size": self.shoe_size,
            "shoe_color": self.shoe_color,
            "complaints": [c.to_dict() for c in self.complaints],
            "custom_complaint": self.custom_complaint,
            "is_price_unknown": self.is_price_unknown,
            "is_free": self.is_free,
            "expected_return_date": to_iso_date(self.expected_return_date),
            "total_price": self.total_price,
            "hub_price": self.hub_price,
            "expense": self.expense,
            "advance_amount": self.advance_amount,
            "payment_method": self.payment_method,
            "balance_paid": self.balance_paid,
            "balance_payment_method": self.balance_payment_method,
            "status": self.status,
            "is_completed": self.is_completed,
            "is_in_house": self.is_in_house,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class OrderComplaint(db.Model):
    """
    Snapshot of a catalog complaint taken at intake.

    complaint_id is informational only (no foreign key): deleting the catalog
    entry must leave historical orders intact.
    """
    __tablename__ = "order_complaints"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    complaint_id = db.Column(db.Integer, nullable=True)
    description = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Float, nullable=False, default=0.0)

    order = db.relationship("Order", back_populates="complaints")

    def to_dict(self) -> dict:
        return {
            "complaint_id": self.complaint_id,
            "description": self.description,
            "price": self.price,
        }
