from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return parsed


def require_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}") from None


def optional_int(value: Any, field_name: str, *, default: int, lo: int = 1, hi: int = 365) -> int:
    if value in (None, ""):
        return default
    parsed = require_positive_int(value, field_name)
    return max(lo, min(hi, parsed))
