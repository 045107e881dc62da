# Overview: Durable OrderRepository backed by the Flask-SQLAlchemy session.

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateSerialError, InvalidStateError, OrderTrackingError, ValidationError
from ..extensions import db
from ..models import Complaint, InHousePreset, Order, OrderGroup, GroupExpense, Store
from ..services.concurrency import lock_for_update, run_with_retry
from ..services.pricing_service import apply_group_expense
from .base import OrderRepository, build_order


SERIAL_CONSTRAINT = "uq_orders_store_serial"


def _is_serial_violation(exc: IntegrityError) -> bool:
    # SQLite reports the columns, PostgreSQL reports the constraint name
    message = str(exc.orig).lower()
    return SERIAL_CONSTRAINT in message or "orders.serial_number" in message


class SqlAlchemyOrderRepository(OrderRepository):
    """
    Every public method is one unit of work: it either commits or rolls back
    before returning. Requires an application context.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _retry(self, op):
        return run_with_retry(op, session=self.session)

    def _locked_order(self, order_id: str) -> Order:
        order = lock_for_update(self.session.query(Order).filter_by(id=order_id)).first()
        if order is None:
            raise InvalidStateError.missing_order(order_id)
        return order

    def _mutate_order(self, order_id: str, mutate: Callable[[Order], None]) -> Order:
        def _op():
            order = self._locked_order(order_id)
            mutate(order)
            order.touch()
            self.session.commit()
            return order

        try:
            return self._retry(_op)
        except InvalidStateError:
            self.session.rollback()
            raise

    # -- catalogs ------------------------------------------------------------

    def get_complaints(self) -> list[Complaint]:
        return self._retry(
            lambda: self.session.query(Complaint).order_by(Complaint.description.asc()).all()
        )

    def add_complaint(self, description: str, default_price: float) -> Complaint:
        def _op():
            complaint = Complaint(description=description, default_price=default_price)
            self.session.add(complaint)
            self.session.commit()
            return complaint

        return self._retry(_op)

    def delete_complaint(self, complaint_id: int) -> bool:
        def _op():
            deleted = self.session.query(Complaint).filter_by(id=complaint_id).delete()
            self.session.commit()
            return deleted > 0

        return self._retry(_op)

    def get_in_house_presets(self) -> list[InHousePreset]:
        return self._retry(
            lambda: self.session.query(InHousePreset).order_by(InHousePreset.description.asc()).all()
        )

    def add_in_house_preset(self, description: str, default_price: float) -> InHousePreset:
        def _op():
            preset = InHousePreset(description=description, default_price=default_price)
            self.session.add(preset)
            self.session.commit()
            return preset

        return self._retry(_op)

    def delete_in_house_preset(self, preset_id: int) -> bool:
        def _op():
            deleted = self.session.query(InHousePreset).filter_by(id=preset_id).delete()
            self.session.commit()
            return deleted > 0

        return self._retry(_op)

    # -- orders --------------------------------------------------------------

    def get_orders(self, store_id: int | None = None) -> list[Order]:
        def _op():
            q = self.session.query(Order)
            if store_id is not None:
                q = q.filter(Order.store_id == store_id)
            return q.order_by(Order.created_at.desc()).all()

        return self._retry(_op)

    def get_order(self, order_id: str) -> Order | None:
        return self._retry(lambda: self.session.query(Order).filter_by(id=order_id).first())

    def create_order(self, fields: dict[str, Any]) -> Order:
        serial = fields["serial_number"]
        store_id = fields["store_id"]

        def _op():
            taken = (
                self.session.query(Order.id)
                .filter(Order.store_id == store_id, Order.serial_number == serial)
                .first()
            )
            if taken is not None:
                raise DuplicateSerialError(serial, store_id)

            order = build_order(fields)
            self.session.add(order)
            try:
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                if _is_serial_violation(exc):
                    raise DuplicateSerialError(serial, store_id) from exc
                raise ValidationError(f"Order rejected by database: {exc.orig}") from exc
            return order

        return self._retry(_op)

    def update_status(self, order_id: str, status: str) -> Order:
        def _apply(order: Order) -> None:
            order.status = status

        return self._mutate_order(order_id, _apply)

    def update_price(self, order_id: str, price: float) -> Order:
        def _apply(order: Order) -> None:
            order.total_price = price
            order.is_price_unknown = False

        return self._mutate_order(order_id, _apply)

    def update_hub_price(self, order_id: str, price: float) -> Order:
        def _apply(order: Order) -> None:
            order.hub_price = price

        return self._mutate_order(order_id, _apply)

    def update_expense(self, order_id: str, expense: float) -> Order:
        def _apply(order: Order) -> None:
            order.expense = expense

        return self._mutate_order(order_id, _apply)

    def update_balance_payment(self, order_id: str, amount: float, method: str | None) -> Order:
        def _apply(order: Order) -> None:
            order.balance_paid = amount
            order.balance_payment_method = method

        return self._mutate_order(order_id, _apply)

    def update_completion(self, order_id: str, completed: bool) -> Order:
        def _apply(order: Order) -> None:
            order.is_completed = completed

        return self._mutate_order(order_id, _apply)

    # -- groups --------------------------------------------------------------

    def create_group(self, name: str, order_ids: list[str]) -> OrderGroup:
        def _op():
            members = [self._locked_order(order_id) for order_id in order_ids]
            group = OrderGroup(name=name)
            self.session.add(group)
            self.session.flush()
            for order in members:
                order.group_id = group.id
                order.touch()
            self.session.commit()
            return group

        try:
            return self._retry(_op)
        except InvalidStateError:
            self.session.rollback()
            raise

    def get_group(self, group_id: int) -> OrderGroup | None:
        return self._retry(lambda: self.session.query(OrderGroup).filter_by(id=group_id).first())

    def add_group_expense(
        self,
        group_id: int,
        description: str,
        amount: float,
    ) -> dict[str, float]:
        def _op():
            group = self.session.query(OrderGroup).filter_by(id=group_id).first()
            if group is None:
                raise InvalidStateError.missing_group(group_id)
            member_ids = [
                row.id
                for row in self.session.query(Order.id).filter(Order.group_id == group_id).order_by(Order.id)
            ]
            # totals come from the locked rows
            members = [self._locked_order(order_id) for order_id in member_ids]
            member_totals = apply_group_expense(members, amount)

            self.session.add(GroupExpense(group_id=group_id, description=description, amount=amount))
            for order in members:
                order.total_price = member_totals[order.id]
                order.touch()
            self.session.commit()
            return member_totals

        try:
            return self._retry(_op)
        except OrderTrackingError:
            self.session.rollback()
            raise

    def get_groups(self, store_id: int | None = None) -> list[OrderGroup]:
        def _op():
            q = self.session.query(OrderGroup)
            if store_id is not None:
                q = q.join(Order, Order.group_id == OrderGroup.id).filter(Order.store_id == store_id).distinct()
            return q.order_by(OrderGroup.created_at.desc()).all()

        return self._retry(_op)

    # -- stores --------------------------------------------------------------

    def create_store(self, name: str, password_hash: str) -> Store:
        def _op():
            exists = (
                self.session.query(Store.id)
                .filter(func.lower(Store.name) == name.lower())
                .first()
            )
            if exists is not None:
                raise ValidationError(f"Store '{name}' already exists")

            store = Store(name=name, password_hash=password_hash)
            self.session.add(store)
            try:
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                raise ValidationError(f"Store '{name}' already exists") from exc
            return store

        return self._retry(_op)

    def get_stores(self) -> list[Store]:
        return self._retry(lambda: self.session.query(Store).order_by(Store.name.asc()).all())

    def get_store(self, store_id: int) -> Store | None:
        return self._retry(lambda: self.session.query(Store).filter_by(id=store_id).first())
