from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import ValidationError


def require_uuid(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field_name}")
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def require_int_range(value: Any, field_name: str, minimum: int, maximum: int) -> int:
    # bool is an int subclass; JSON true/false is never a count.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field_name} must be an integer")
        value = int(value)
    if value < minimum or value > maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return value


def require_decimal_range(value: Any, field_name: str, minimum: Decimal, maximum: Decimal) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if number < minimum or number > maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return number


def require_max_length(value: Any, field_name: str, max_len: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value
