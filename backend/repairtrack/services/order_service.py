# Overview: Order intake: field validation, intake pricing, serial allocation with one retry.

"""
Order Intake

WHY A SEPARATE SERVICE: intake is the only place an order is built from raw
form input. It resolves catalog selections into owned snapshots, prices the
order, allocates a serial number and hands the finished field set to the
repository. Everything after creation goes through OrderLifecycleManager.

CATALOG SNAPSHOTS:
- Complaints are copied onto the order (description + default price), so
  deleting a catalog entry later leaves the order as it was.
- In-house presets are folded into custom_complaint text and mark the order
  as in-house.

SERIAL RACE: two intakes can allocate the same serial. The repository rejects
the later write with DuplicateSerialError; intake re-allocates and retries
exactly once. A second collision, or a collision on a serial the caller typed
in, propagates.
"""

from __future__ import annotations

from typing import Any

from ..errors import DuplicateSerialError, ValidationError
from ..repositories.base import OrderRepository
from ..time_utils import parse_iso_date
from ..validation import coerce_amount, coerce_bool, normalize_phone, optional_text, require_text
from . import pricing_service
from .notification_service import NotificationDispatcher, order_received_message
from .pipeline import Pipeline
from .serial_service import DEFAULT_PREFIX, next_serial_number


class OrderIntakeService:
    def __init__(
        self,
        repository: OrderRepository,
        pipeline: Pipeline,
        dispatcher: NotificationDispatcher | None = None,
        *,
        serial_prefix: str = DEFAULT_PREFIX,
    ):
        self.repository = repository
        self.pipeline = pipeline
        self.dispatcher = dispatcher
        self.serial_prefix = serial_prefix

    def next_serial(self, store_id: int) -> str:
        return next_serial_number(self.repository.get_orders(store_id), self.serial_prefix)

    def create_order(self, store_id: int, data: dict[str, Any]):
        if data is None or not isinstance(data, dict):
            raise ValidationError("Invalid order payload")
        if self.repository.get_store(store_id) is None:
            raise ValidationError(f"Store {store_id} not found")

        fields = self._build_fields(store_id, data)

        requested_serial = optional_text(data.get("serial_number"), max_length=32)
        if requested_serial:
            fields["serial_number"] = requested_serial
            order = self.repository.create_order(fields)
        else:
            fields["serial_number"] = self.next_serial(store_id)
            try:
                order = self.repository.create_order(fields)
            except DuplicateSerialError:
                fields["serial_number"] = self.next_serial(store_id)
                order = self.repository.create_order(fields)

        if self.dispatcher is not None:
            self.dispatcher.dispatch(order.whatsapp_number, order_received_message(order))
        return order

    def _build_fields(self, store_id: int, data: dict[str, Any]) -> dict[str, Any]:
        complaints = self._resolve(
            data.get("complaint_ids"), self.repository.get_complaints(), "complaint"
        )
        presets = self._resolve(
            data.get("preset_ids"), self.repository.get_in_house_presets(), "in-house preset"
        )

        is_free = coerce_bool(data.get("is_free", False))
        # A free order has a final price of 0
        is_price_unknown = coerce_bool(data.get("is_price_unknown", False)) and not is_free
        custom_price = coerce_amount(data.get("custom_price"), "custom_price", allow_none=True)

        if data.get("total_price") is not None and not (is_free or is_price_unknown):
            total_price = coerce_amount(data["total_price"], "total_price")
        else:
            total_price = pricing_service.intake_total(
                [c.default_price for c in complaints] + [p.default_price for p in presets],
                custom_price,
                is_price_unknown=is_price_unknown,
                is_free=is_free,
            )

        try:
            expected_return_date = parse_iso_date(data.get("expected_return_date"))
        except (TypeError, ValueError):
            raise ValidationError("expected_return_date must be an ISO-8601 date")

        return {
            "store_id": store_id,
            "status": self.pipeline.first,
            "customer_name": require_text(data.get("customer_name"), "customer_name", max_length=255),
            "whatsapp_number": normalize_phone(data.get("whatsapp_number")),
            "shoe_model": require_text(data.get("shoe_model"), "shoe_model", max_length=255),
            "shoe_size": optional_text(data.get("shoe_size"), max_length=32),
            "shoe_color": optional_text(data.get("shoe_color"), max_length=64),
            "complaints": [
                {"complaint_id": c.id, "description": c.description, "price": c.default_price}
                for c in complaints
            ],
            "custom_complaint": self._fold_presets(presets, optional_text(data.get("custom_complaint"))),
            "is_price_unknown": is_price_unknown,
            "is_free": is_free,
            "is_in_house": coerce_bool(data.get("is_in_house", False)) or bool(presets),
            "expected_return_date": expected_return_date,
            "total_price": total_price,
            "advance_amount": coerce_amount(data.get("advance_amount", 0), "advance_amount", allow_none=True) or 0.0,
            "payment_method": optional_text(data.get("payment_method"), max_length=32),
        }

    @staticmethod
    def _resolve(ids, catalog: list, label: str) -> list:
        if not ids:
            return []
        if not isinstance(ids, (list, tuple)):
            raise ValidationError(f"{label} ids must be a list")
        by_id = {item.id: item for item in catalog}
        resolved = []
        for raw in dict.fromkeys(ids):
            try:
                key = int(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid {label} id: {raw!r}")
            if key not in by_id:
                raise ValidationError(f"Unknown {label} id: {raw}")
            resolved.append(by_id[key])
        return resolved

    @staticmethod
    def _fold_presets(presets: list, custom_text: str | None) -> str | None:
        """'Preset A, Preset B; custom text'"""
        preset_text = ", ".join(p.description for p in presets)
        if preset_text and custom_text:
            return f"{preset_text}; {custom_text}"
        return preset_text or custom_text
