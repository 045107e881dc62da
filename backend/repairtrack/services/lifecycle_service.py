# Overview: Order lifecycle rules: stage transitions, completion, pricing updates and groups.

"""
Order Lifecycle Manager

================================================================================
PURPOSE: Sole writer of status, is_completed and every derived money field
================================================================================

STATE MACHINE (stages come from the injected Pipeline):
    hub:          submitted -> shipped -> received -> completed -> reshipped -> in_store
    single_site:  submitted -> received -> completed -> departure -> in_store

RULES:
1. advance() moves exactly one stage; moving past either edge raises
   BoundaryError and changes nothing.
2. set_status() jumps to any stage directly (no adjacency check). Bulk moves
   use it.
3. is_completed may only become true while status is the final stage.
   Clearing it is unconditional.
4. A completed order cannot leave the final stage until it is reopened
   (toggle_completion(False)); otherwise rule 3 would be broken silently.
5. Entering the ready stage messages the customer, fire-and-forget. A failed
   notification never rolls back the status change.
6. Bulk operations never stop at the first failure; they report per-order
   outcomes in a BulkResult.
7. total_price changes only through update_price() or a group expense.

Concurrent edits to one order are last-write-wins.
================================================================================
"""

from __future__ import annotations

from typing import Iterable

from ..errors import BoundaryError, InvalidStateError, OrderTrackingError, ValidationError
from ..repositories.base import BulkResult, OrderRepository
from ..validation import coerce_amount, optional_text, require_text
from . import pricing_service
from .notification_service import (
    NotificationDispatcher,
    price_estimate_message,
    ready_for_pickup_message,
)
from .pipeline import Pipeline


class OrderLifecycleManager:
    def __init__(
        self,
        repository: OrderRepository,
        pipeline: Pipeline,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.repository = repository
        self.pipeline = pipeline
        self.dispatcher = dispatcher

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_order(self, order_id: str):
        order = self.repository.get_order(order_id)
        if order is None:
            raise InvalidStateError.missing_order(order_id)
        return order

    def active_orders(self, store_id: int | None = None) -> list:
        """Pipeline view: everything not yet marked completed."""
        return [o for o in self.repository.get_orders(store_id) if not o.is_completed]

    def completed_orders(self, store_id: int | None = None) -> list:
        return [o for o in self.repository.get_orders(store_id) if o.is_completed]

    def board(self, store_id: int | None = None) -> dict[str, list]:
        """Active orders bucketed by stage, in pipeline order."""
        columns: dict[str, list] = {stage: [] for stage in self.pipeline}
        for order in self.active_orders(store_id):
            if order.status in columns:
                columns[order.status].append(order)
        return columns

    # =========================================================================
    # STATUS
    # =========================================================================

    def advance(self, order_id: str, direction: str):
        order = self.get_order(order_id)
        target = self.pipeline.neighbour(order.status, direction)
        if target is None:
            raise BoundaryError(order_id, order.status, direction)
        return self.set_status(order_id, target)

    def set_status(self, order_id: str, stage: str):
        self.pipeline.validate(stage)
        order = self.get_order(order_id)
        previous = order.status

        if order.is_completed and not self.pipeline.is_final(stage):
            raise InvalidStateError(
                f"Order {order_id} is marked completed; reopen it before moving it to '{stage}'",
                order_id=order_id,
            )

        order = self.repository.update_status(order_id, stage)

        if stage == self.pipeline.ready_stage and previous != stage:
            self._notify(order.whatsapp_number, ready_for_pickup_message(order))
        return order

    def bulk_set_status(self, order_ids: Iterable[str], stage: str) -> BulkResult:
        """
        Apply set_status to every id. The target stage is validated once up
        front; an unknown stage fails the whole call because no order could
        succeed.
        """
        self.pipeline.validate(stage)
        order_ids = list(order_ids)
        if not all(isinstance(order_id, str) for order_id in order_ids):
            raise ValidationError("order_ids must be a list of strings")

        result = BulkResult()
        for order_id in dict.fromkeys(order_ids):
            try:
                self.set_status(order_id, stage)
            except OrderTrackingError as exc:
                result.add_failure(order_id, str(exc))
            else:
                result.succeeded.append(order_id)
        return result

    def toggle_completion(self, order_id: str, completed: bool):
        order = self.get_order(order_id)
        if completed and not self.pipeline.is_final(order.status):
            raise InvalidStateError(
                f"Order {order_id} can only be completed at stage '{self.pipeline.last}' "
                f"(current stage is '{order.status}')",
                order_id=order_id,
            )
        return self.repository.update_completion(order_id, bool(completed))

    # =========================================================================
    # PRICING
    # =========================================================================

    def update_price(self, order_id: str, price):
        """Set the customer price. Also marks the price as known."""
        amount = coerce_amount(price, "total_price")
        order = self.repository.update_price(order_id, amount)
        self._notify(order.whatsapp_number, price_estimate_message(order))
        return order

    def update_hub_price(self, order_id: str, price):
        amount = coerce_amount(price, "hub_price")
        order = self.get_order(order_id)
        if order.is_in_house:
            raise InvalidStateError(
                f"Order {order_id} is repaired in-house and has no hub price",
                order_id=order_id,
            )
        return self.repository.update_hub_price(order_id, amount)

    def update_expense(self, order_id: str, expense):
        amount = coerce_amount(expense, "expense")
        return self.repository.update_expense(order_id, amount)

    def record_balance_payment(self, order_id: str, amount, method: str | None = None):
        """
        Record the payment taken after intake. The stored balance_paid is
        replaced, not accumulated, so re-submitting the same form is safe.
        """
        value = coerce_amount(amount, "balance_paid")
        return self.repository.update_balance_payment(order_id, value, optional_text(method, max_length=32))

    def summary(self, order_id: str) -> dict:
        return pricing_service.summarize(self.get_order(order_id))

    # =========================================================================
    # GROUPS
    # =========================================================================

    def create_group(self, name: str, order_ids: Iterable[str], *, store_id: int | None = None):
        name = require_text(name, "name", max_length=255)
        ids = list(dict.fromkeys(order_ids or []))
        if not ids:
            raise ValidationError("A group needs at least one order")

        for order_id in ids:
            order = self.get_order(order_id)
            if store_id is not None and order.store_id != store_id:
                raise InvalidStateError.missing_order(order_id)
            if order.group_id is not None:
                raise InvalidStateError(
                    f"Order {order_id} already belongs to group {order.group_id}",
                    order_id=order_id,
                )
        return self.repository.create_group(name, ids)

    def add_group_expense(self, group_id: int, description: str, amount) -> dict[str, float]:
        """
        Record a shared expense and add an equal share to every member's
        total_price. Returns the new totals keyed by order id.

        Calling this twice with the same expense adds it twice.
        """
        description = require_text(description, "description", max_length=255)
        value = coerce_amount(amount, "amount")

        return self.repository.add_group_expense(group_id, description, value)

    def get_groups(self, store_id: int | None = None) -> list:
        return self.repository.get_groups(store_id)

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _notify(self, phone_number: str | None, message: str) -> None:
        if self.dispatcher is not None:
            self.dispatcher.dispatch(phone_number, message)
