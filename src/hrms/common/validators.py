from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_enum(value, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def optional_enum(value, enum_cls: Type[E], field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    return require_enum(value, enum_cls, field_name)


def require_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_month(value) -> int:
    month = require_int(value, "month")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return month


def require_year(value) -> int:
    year = require_int(value, "year")
    if not 1970 <= year <= 9999:
        raise ValidationError("year is out of range")
    return year


def require_amount(value, field_name: str) -> float:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount
