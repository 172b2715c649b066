from __future__ import annotations

import math
from typing import Any


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate barcode)."""


def parse_amount(value: Any, field: str, *, allow_zero: bool = True) -> float:
    """
    Coerce a money amount from JSON/CLI input.

    Accepts ints, floats and numeric strings. Booleans, NaN/inf, negatives
    and (unless allow_zero) zero are rejected. Zero is a real value here,
    not "missing": an opening float of 0 is valid.
    """
    if value is None:
        raise ValidationError(f"{field} is required")

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} is required")
        try:
            value = float(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a number")

    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")

    amount = float(value)
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if amount == 0 and not allow_zero:
        raise ValidationError(f"{field} must be positive")
    return amount


def parse_quantity(value: Any, field: str = "quantity", *, minimum: int = 1) -> int:
    """Strict integer parsing: rejects floats, decimals and scientific notation."""
    if value is None:
        raise ValidationError(f"{field} is required")

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            value = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")

    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")

    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")

    if value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return value


def parse_optional_id(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return parse_quantity(value, field, minimum=1)


def require_text(value: Any, field: str, *, max_length: int | None = None) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} cannot be blank")
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def optional_text(value: Any, *, max_length: int | None = None, field: str = "value") -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def require_json_object(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload
