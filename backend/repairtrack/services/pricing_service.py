# Overview: Pure pricing computations over an order snapshot; no database access.

"""
Pricing Engine

Every function here reads plain attributes from an order-like object
(total_price, hub_price, expense, advance_amount, balance_paid,
is_price_unknown) and never mutates it. Absent (None) money fields count as 0.

PROFIT:       total_price - hub_price - expense
TOTAL PAID:   advance_amount + balance_paid
BALANCE DUE:  max(0, total_price - total paid)   (overpayment clamps to 0)

An order with is_price_unknown has no final price yet. The numbers still
compute (the stored price is 0), but anything shown to a person must go
through display_amount(), which renders "TBD".
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from ..errors import ValidationError


PRICE_UNKNOWN_DISPLAY = "TBD"


def _amount(value: Any) -> float:
    return float(value) if value is not None else 0.0


def profit(order) -> float:
    return _amount(order.total_price) - _amount(order.hub_price) - _amount(order.expense)


def total_paid(order) -> float:
    return _amount(order.advance_amount) + _amount(order.balance_paid)


def balance_due(order) -> float:
    return max(0.0, _amount(order.total_price) - total_paid(order))


def is_fully_paid(order) -> bool:
    """Only meaningful once the price is final (is_price_unknown is False)."""
    return balance_due(order) == 0


def apply_group_expense(members: Sequence[Any], amount: float) -> dict[str, float]:
    """
    Split a shared expense evenly across group members.

    Returns {order_id: new_total_price}. The quotient is plain floating-point
    division; 100 across 3 orders adds 33.333... to each with no remainder
    reconciliation.

    Not idempotent: every call adds the share again, so callers must apply a
    given expense exactly once.
    """
    if not members:
        raise ValidationError("Cannot apply an expense to a group with no orders")
    if amount is None or amount < 0:
        raise ValidationError("Expense amount must be >= 0")

    share = float(amount) / len(members)
    return {member.id: _amount(member.total_price) + share for member in members}


def intake_total(
    catalog_prices: Iterable[float],
    custom_price: float | None = None,
    *,
    is_price_unknown: bool = False,
    is_free: bool = False,
) -> float:
    """
    Customer price at intake: selected complaint/preset default prices plus
    any custom-complaint price. Free-service and price-unknown orders are 0.
    """
    if is_free or is_price_unknown:
        return 0.0
    return sum(_amount(p) for p in catalog_prices) + _amount(custom_price)


def display_amount(order, value: Any) -> str:
    if order.is_price_unknown:
        return PRICE_UNKNOWN_DISPLAY
    return f"{_amount(value):.2f}"


def summarize(order) -> dict:
    """Derived figures for an order, plus display strings gated on the flag."""
    return {
        "order_id": order.id,
        "total_price": _amount(order.total_price),
        "hub_price": _amount(order.hub_price),
        "expense": _amount(order.expense),
        "profit": profit(order),
        "total_paid": total_paid(order),
        "balance_due": balance_due(order),
        "is_fully_paid": is_fully_paid(order),
        "is_price_unknown": bool(order.is_price_unknown),
        "display": {
            "total_price": display_amount(order, order.total_price),
            "balance_due": display_amount(order, balance_due(order)),
            "profit": display_amount(order, profit(order)),
        },
    }
