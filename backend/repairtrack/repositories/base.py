# Overview: Storage contract consumed by the lifecycle manager and intake service.

"""
Order Repository Interface

The core talks to storage only through OrderRepository. Two implementations
satisfy it:
- SqlAlchemyOrderRepository: durable, Flask-SQLAlchemy session
- InMemoryOrderRepository: process-local dicts (prototype store, test double)

CONTRACT:
- Every mutation on a missing order id raises InvalidStateError.
- create_order raises DuplicateSerialError when (store_id, serial_number) is
  taken.
- Transport/storage failures surface as RepositoryUnavailableError.
- Every mutation bumps order.updated_at.
- Writes are plain last-write-wins; no version token is checked.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..errors import OrderTrackingError
from ..models import Order, OrderComplaint, Complaint, InHousePreset, OrderGroup, Store
from ..time_utils import utcnow


@dataclass
class BulkResult:
    """Aggregate outcome of a multi-order operation."""
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    def add_failure(self, order_id: str, reason: str) -> None:
        self.failed.append(order_id)
        self.errors[order_id] = reason

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "succeeded": list(self.succeeded),
            "failed": list(self.failed),
            "errors": dict(self.errors),
        }


def build_order(fields: dict[str, Any]) -> Order:
    """
    Construct a fully populated, not-yet-persisted Order.

    Column defaults only apply on flush, so every attribute is set explicitly
    here; the in-memory repository never flushes.
    """
    now = utcnow()
    order = Order(
        id=fields.get("id") or str(uuid.uuid4()),
        serial_number=fields["serial_number"],
        store_id=fields["store_id"],
        group_id=None,
        customer_name=fields["customer_name"],
        whatsapp_number=fields["whatsapp_number"],
        shoe_model=fields["shoe_model"],
        shoe_size=fields.get("shoe_size"),
        shoe_color=fields.get("shoe_color"),
        custom_complaint=fields.get("custom_complaint"),
        is_price_unknown=bool(fields.get("is_price_unknown", False)),
        is_free=bool(fields.get("is_free", False)),
        expected_return_date=fields.get("expected_return_date"),
        total_price=float(fields.get("total_price") or 0.0),
        hub_price=fields.get("hub_price"),
        expense=fields.get("expense"),
        advance_amount=float(fields.get("advance_amount") or 0.0),
        payment_method=fields.get("payment_method"),
        balance_paid=float(fields.get("balance_paid") or 0.0),
        balance_payment_method=fields.get("balance_payment_method"),
        status=fields["status"],
        is_completed=False,
        is_in_house=bool(fields.get("is_in_house", False)),
        created_at=fields.get("created_at") or now,
        updated_at=now,
    )
    for snap in fields.get("complaints") or []:
        order.complaints.append(
            OrderComplaint(
                complaint_id=snap.get("complaint_id"),
                description=snap["description"],
                price=float(snap.get("price") or 0.0),
            )
        )
    return order


class OrderRepository(ABC):
    """Durable CRUD and queries over orders, catalogs, groups and stores."""

    # -- catalogs ------------------------------------------------------------

    @abstractmethod
    def get_complaints(self) -> list[Complaint]:
        ...

    @abstractmethod
    def add_complaint(self, description: str, default_price: float) -> Complaint:
        ...

    @abstractmethod
    def delete_complaint(self, complaint_id: int) -> bool:
        ...

    @abstractmethod
    def get_in_house_presets(self) -> list[InHousePreset]:
        ...

    @abstractmethod
    def add_in_house_preset(self, description: str, default_price: float) -> InHousePreset:
        ...

    @abstractmethod
    def delete_in_house_preset(self, preset_id: int) -> bool:
        ...

    # -- orders --------------------------------------------------------------

    @abstractmethod
    def get_orders(self, store_id: int | None = None) -> list[Order]:
        """Newest first. store_id=None is the hub's global view."""

    @abstractmethod
    def get_order(self, order_id: str) -> Order | None:
        ...

    @abstractmethod
    def create_order(self, fields: dict[str, Any]) -> Order:
        ...

    @abstractmethod
    def update_status(self, order_id: str, status: str) -> Order:
        ...

    def bulk_update_status(self, order_ids: Iterable[str], status: str) -> BulkResult:
        result = BulkResult()
        for order_id in order_ids:
            try:
                self.update_status(order_id, status)
            except OrderTrackingError as exc:
                result.add_failure(order_id, str(exc))
            else:
                result.succeeded.append(order_id)
        return result

    @abstractmethod
    def update_price(self, order_id: str, price: float) -> Order:
        """Sets total_price and clears is_price_unknown."""

    @abstractmethod
    def update_hub_price(self, order_id: str, price: float) -> Order:
        ...

    @abstractmethod
    def update_expense(self, order_id: str, expense: float) -> Order:
        ...

    @abstractmethod
    def update_balance_payment(self, order_id: str, amount: float, method: str | None) -> Order:
        ...

    @abstractmethod
    def update_completion(self, order_id: str, completed: bool) -> Order:
        ...

    # -- groups --------------------------------------------------------------

    @abstractmethod
    def create_group(self, name: str, order_ids: list[str]) -> OrderGroup:
        ...

    @abstractmethod
    def get_group(self, group_id: int) -> OrderGroup | None:
        ...

    @abstractmethod
    def add_group_expense(
        self,
        group_id: int,
        description: str,
        amount: float,
    ) -> dict[str, float]:
        """
        Record the expense and add an equal share to every member's current
        total_price in the same unit of work. Returns the new totals keyed by
        order id. Raises ValidationError when the group has no orders.
        """

    @abstractmethod
    def get_groups(self, store_id: int | None = None) -> list[OrderGroup]:
        """Hydrated with member orders and expenses."""

    # -- stores --------------------------------------------------------------

    @abstractmethod
    def create_store(self, name: str, password_hash: str) -> Store:
        ...

    @abstractmethod
    def get_stores(self) -> list[Store]:
        ...

    @abstractmethod
    def get_store(self, store_id: int) -> Store | None:
        ...
