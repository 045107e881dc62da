# Overview: Next-serial-number allocation from existing orders.

"""
Serial Allocator

Serial numbers look like LW01, LW02, ... LW99, LW100. The next number comes
from the MOST RECENTLY CREATED order carrying a matching serial, not the
numerically largest one: with LW01 then LW03 on file (LW03 newest) the next
serial is LW04, and a hand-entered LW50 followed by LW07 yields LW08.

Two concurrent intakes can compute the same serial. The repository rejects
the second write with DuplicateSerialError and the intake service
re-allocates once (see order_service.create_order).
"""

from __future__ import annotations

import re
from typing import Any, Iterable


DEFAULT_PREFIX = "LW"
PAD_WIDTH = 2


def serial_pattern(prefix: str = DEFAULT_PREFIX) -> re.Pattern:
    return re.compile(rf"^{re.escape(prefix)}(\d+)$", re.IGNORECASE)


def format_serial(number: int, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{number:0{PAD_WIDTH}d}"


def parse_serial(value: str | None, prefix: str = DEFAULT_PREFIX) -> int | None:
    if not value:
        return None
    match = serial_pattern(prefix).match(value.strip())
    if not match:
        return None
    return int(match.group(1))


def next_serial_number(orders: Iterable[Any], prefix: str = DEFAULT_PREFIX) -> str:
    latest = None
    latest_number = None
    for order in orders:
        number = parse_serial(order.serial_number, prefix)
        if number is None:
            continue
        if (
            latest is None
            or order.created_at > latest.created_at
            # same instant: the higher number is the later intake
            or (order.created_at == latest.created_at and number > latest_number)
        ):
            latest = order
            latest_number = number

    if latest_number is None:
        return format_serial(1, prefix)
    return format_serial(latest_number + 1, prefix)
