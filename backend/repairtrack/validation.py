# Overview: Input coercion helpers shared by services and routes.

from __future__ import annotations

import math
import re
from typing import Any

from .errors import ValidationError


# Upper bound on any single money field; keeps nonsense input out of the DB
MAX_AMOUNT = 9_999_999.99

_PHONE_STRIP = re.compile(r"[\s\-().+]")


def coerce_amount(value: Any, field: str, *, allow_none: bool = False) -> float | None:
    """
    Normalize a money value to a non-negative float.

    Accepts ints, floats and numeric strings. Booleans, NaN, infinities and
    negative values are rejected.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if allow_none:
            return None
        raise ValidationError(f"{field} is required")

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number")

    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")

    amount = float(value)
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds maximum of {MAX_AMOUNT:,.2f}")
    return amount


def require_text(value: Any, field: str, *, min_length: int = 1, max_length: int | None = None) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    text = str(value).strip()
    if len(text) < min_length:
        if min_length <= 1:
            raise ValidationError(f"{field} is required")
        raise ValidationError(f"{field} must be at least {min_length} characters")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def optional_text(value: Any, *, max_length: int | None = None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length is not None:
        text = text[:max_length]
    return text


def normalize_phone(value: Any) -> str:
    """
    Loose WhatsApp number check: separators stripped, 7-15 digits remain.

    The stored value keeps the caller's formatting apart from surrounding
    whitespace.
    """
    raw = require_text(value, "whatsapp_number")
    digits = _PHONE_STRIP.sub("", raw)
    if not digits.isdigit() or not 7 <= len(digits) <= 15:
        raise ValidationError("whatsapp_number must contain 7-15 digits")
    return raw


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    # fallback: truthiness
    return bool(value)
