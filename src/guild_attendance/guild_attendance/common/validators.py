from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_int(value: Any, field_name: str) -> int:
    """Parse a required integer id (JSON numbers and numeric strings)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_int(value, field_name)


def as_count(value: Any, field_name: str = "Count", maximum: Optional[int] = None) -> int:
    """Activity counter: absent or unparsable input counts as 0, negatives are clamped.

    Values above ``maximum`` are rejected rather than clamped.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        n = int(value)
    except (TypeError, ValueError):
        try:
            n = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    if maximum is not None and n > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum}")
    return max(n, 0)
