from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_pin(value: str, *, min_len: int = 4) -> str:
    value = require_non_empty(value, "PIN")
    if not value.isdigit():
        raise ValidationError("PIN must contain digits only")
    return require_min_length(value, "PIN", min_len)


def require_latitude(value: float) -> float:
    value = float(value)
    if not -90.0 <= value <= 90.0:
        raise ValidationError("Latitude must be between -90 and 90")
    return value


def require_longitude(value: float) -> float:
    value = float(value)
    if not -180.0 <= value <= 180.0:
        raise ValidationError("Longitude must be between -180 and 180")
    return value
