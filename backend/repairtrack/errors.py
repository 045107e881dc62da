# Overview: Typed errors raised by the order-tracking core and its collaborators.

from __future__ import annotations


class OrderTrackingError(Exception):
    """Base class for every domain error raised by repairtrack."""


class ValidationError(OrderTrackingError, ValueError):
    """400-level input problem (negative amount, unknown stage, missing field)."""


class BoundaryError(OrderTrackingError):
    """
    Raised when a stage advance would move past either end of the pipeline.

    The order is left untouched.
    """

    def __init__(self, order_id: str, status: str, direction: str):
        self.order_id = order_id
        self.status = status
        self.direction = direction
        edge = "first" if direction == "prev" else "last"
        super().__init__(
            f"Order {order_id} is already at the {edge} stage '{status}'; cannot move {direction}"
        )


class InvalidStateError(OrderTrackingError):
    """
    Raised when an operation's precondition does not hold for the order's
    current state, or when the order does not exist.
    """

    def __init__(self, message: str, *, order_id: str | None = None, not_found: bool = False):
        self.order_id = order_id
        self.not_found = not_found
        super().__init__(message)

    @classmethod
    def missing_order(cls, order_id: str) -> "InvalidStateError":
        return cls(f"Order {order_id} not found", order_id=order_id, not_found=True)

    @classmethod
    def missing_group(cls, group_id: int) -> "InvalidStateError":
        return cls(f"Group {group_id} not found", not_found=True)


class DuplicateSerialError(OrderTrackingError):
    """Serial number already taken within the store (write-time uniqueness)."""

    def __init__(self, serial_number: str, store_id: int | None = None):
        self.serial_number = serial_number
        self.store_id = store_id
        super().__init__(f"Serial number {serial_number} is already in use")


class RepositoryUnavailableError(OrderTrackingError):
    """Storage transport failure; the caller may retry the whole operation."""


class AuthenticationError(OrderTrackingError):
    """Submitted password did not resolve to a store or the hub."""
