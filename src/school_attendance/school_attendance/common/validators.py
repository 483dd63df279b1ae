from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_choice(value, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls((value or "").strip())
    except (ValueError, AttributeError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} {value!r} (allowed: {allowed})")


def optional_int(value, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
