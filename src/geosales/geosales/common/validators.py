from __future__ import annotations

from typing import Any

from ..core.exceptions import InvalidInput, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def coerce_float(value: Any, field_name: str) -> float:
    """Turn request input into a float; range is deliberately not checked."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput(f"{field_name} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field_name} must be a number")
