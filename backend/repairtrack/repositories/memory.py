# Overview: Process-local repository used for prototyping and as a test double.

from __future__ import annotations

import itertools
import threading
from typing import Any

from ..errors import DuplicateSerialError, InvalidStateError, ValidationError
from ..models import Complaint, InHousePreset, Order, OrderGroup, GroupExpense, Store
from ..time_utils import utcnow
from ..services.pricing_service import apply_group_expense
from .base import OrderRepository, build_order


class InMemoryOrderRepository(OrderRepository):
    """
    Dict-backed OrderRepository.

    Entities are ordinary (transient) model instances that are never added to
    a SQLAlchemy session. A single lock makes each call atomic, which mirrors
    the single-row atomicity the database gives the durable implementation.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self.orders: dict[str, Order] = {}
        self.complaints: dict[int, Complaint] = {}
        self.presets: dict[int, InHousePreset] = {}
        self.groups: dict[int, OrderGroup] = {}
        self.stores: dict[int, Store] = {}

    def _next_id(self) -> int:
        return next(self._ids)

    def _require_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise InvalidStateError.missing_order(order_id)
        return order

    # -- catalogs ------------------------------------------------------------

    def get_complaints(self) -> list[Complaint]:
        with self._lock:
            return sorted(self.complaints.values(), key=lambda c: c.description)

    def add_complaint(self, description: str, default_price: float) -> Complaint:
        with self._lock:
            complaint = Complaint(
                id=self._next_id(),
                description=description,
                default_price=default_price,
                created_at=utcnow(),
            )
            self.complaints[complaint.id] = complaint
            return complaint

    def delete_complaint(self, complaint_id: int) -> bool:
        with self._lock:
            return self.complaints.pop(complaint_id, None) is not None

    def get_in_house_presets(self) -> list[InHousePreset]:
        with self._lock:
            return sorted(self.presets.values(), key=lambda p: p.description)

    def add_in_house_preset(self, description: str, default_price: float) -> InHousePreset:
        with self._lock:
            preset = InHousePreset(
                id=self._next_id(),
                description=description,
                default_price=default_price,
                created_at=utcnow(),
            )
            self.presets[preset.id] = preset
            return preset

    def delete_in_house_preset(self, preset_id: int) -> bool:
        with self._lock:
            return self.presets.pop(preset_id, None) is not None

    # -- orders --------------------------------------------------------------

    def get_orders(self, store_id: int | None = None) -> list[Order]:
        with self._lock:
            orders = [o for o in self.orders.values() if store_id is None or o.store_id == store_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def get_order(self, order_id: str) -> Order | None:
        with self._lock:
            return self.orders.get(order_id)

    def create_order(self, fields: dict[str, Any]) -> Order:
        with self._lock:
            serial = fields["serial_number"]
            for existing in self.orders.values():
                if existing.store_id == fields["store_id"] and existing.serial_number == serial:
                    raise DuplicateSerialError(serial, fields["store_id"])
            order = build_order(fields)
            self.orders[order.id] = order
            return order

    def update_status(self, order_id: str, status: str) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.status = status
            order.touch()
            return order

    def update_price(self, order_id: str, price: float) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.total_price = price
            order.is_price_unknown = False
            order.touch()
            return order

    def update_hub_price(self, order_id: str, price: float) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.hub_price = price
            order.touch()
            return order

    def update_expense(self, order_id: str, expense: float) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.expense = expense
            order.touch()
            return order

    def update_balance_payment(self, order_id: str, amount: float, method: str | None) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.balance_paid = amount
            order.balance_payment_method = method
            order.touch()
            return order

    def update_completion(self, order_id: str, completed: bool) -> Order:
        with self._lock:
            order = self._require_order(order_id)
            order.is_completed = completed
            order.touch()
            return order

    # -- groups --------------------------------------------------------------

    def create_group(self, name: str, order_ids: list[str]) -> OrderGroup:
        with self._lock:
            members = [self._require_order(order_id) for order_id in order_ids]
            group = OrderGroup(id=self._next_id(), name=name, created_at=utcnow())
            for order in members:
                order.group = group
                order.group_id = group.id
                order.touch()
            self.groups[group.id] = group
            return group

    def get_group(self, group_id: int) -> OrderGroup | None:
        with self._lock:
            return self.groups.get(group_id)

    def add_group_expense(
        self,
        group_id: int,
        description: str,
        amount: float,
    ) -> dict[str, float]:
        with self._lock:
            group = self.groups.get(group_id)
            if group is None:
                raise InvalidStateError.missing_group(group_id)
            members = list(group.orders)
            member_totals = apply_group_expense(members, amount)
            group.expenses.append(
                GroupExpense(
                    id=self._next_id(),
                    group_id=group_id,
                    description=description,
                    amount=amount,
                    created_at=utcnow(),
                )
            )
            for order in members:
                order.total_price = member_totals[order.id]
                order.touch()
            return member_totals

    def get_groups(self, store_id: int | None = None) -> list[OrderGroup]:
        with self._lock:
            groups = sorted(self.groups.values(), key=lambda g: g.created_at, reverse=True)
            if store_id is None:
                return groups
            return [g for g in groups if any(o.store_id == store_id for o in g.orders)]

    # -- stores --------------------------------------------------------------

    def create_store(self, name: str, password_hash: str) -> Store:
        with self._lock:
            if any(s.name.lower() == name.lower() for s in self.stores.values()):
                raise ValidationError(f"Store '{name}' already exists")
            now = utcnow()
            store = Store(
                id=self._next_id(),
                name=name,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self.stores[store.id] = store
            return store

    def get_stores(self) -> list[Store]:
        with self._lock:
            return sorted(self.stores.values(), key=lambda s: s.name)

    def get_store(self, store_id: int) -> Store | None:
        with self._lock:
            return self.stores.get(store_id)
