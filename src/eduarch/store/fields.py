"""Field normalizers for repository input.

Each normalizer takes the field name and a raw value, and returns the
normalized value or raises ValidationError naming the field and the failed
rule.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from eduarch.store.errors import ValidationError
from eduarch.utils.validators import parse_timestamp, validate_email

Normalizer = Callable[[str, Any], Any]


def text(field: str, value: Any) -> str:
    """Required, non-empty string."""
    if not isinstance(value, str):
        raise ValidationError(field, "must_be_string")
    value = value.strip()
    if not value:
        raise ValidationError(field, "required")
    return value


def optional_text(field: str, value: Any) -> str | None:
    """String or None. Blank strings are kept as given."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must_be_string")
    return value


def plain_text(field: str, value: Any) -> str:
    """String that may be empty (descriptions, content)."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(field, "must_be_string")
    return value


def email(field: str, value: Any) -> str:
    """Required email address."""
    value = text(field, value)
    if not validate_email(value):
        raise ValidationError(field, "invalid_email", f"{field}: invalid email format")
    return value


def reference(field: str, value: Any) -> str:
    """Required entity id."""
    return text(field, value)


def optional_reference(field: str, value: Any) -> str | None:
    if value is None:
        return None
    return text(field, value)


def reference_list(field: str, value: Any) -> list[str]:
    """List of entity ids, deduplicated in first-seen order."""
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple, set)):
        raise ValidationError(field, "must_be_list")
    result: list[str] = []
    for item in value:
        item = text(field, item)
        if item not in result:
            result.append(item)
    return result


def non_negative_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "must_be_integer")
    if value < 0:
        raise ValidationError(field, "must_be_non_negative")
    return value


def _number(field: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "must_be_number")
    if not math.isfinite(value):
        raise ValidationError(field, "must_be_finite")
    return float(value)


def non_negative_number(field: str, value: Any) -> float:
    value = _number(field, value)
    if value < 0:
        raise ValidationError(field, "must_be_non_negative")
    return value


def optional_number(field: str, value: Any) -> float | None:
    if value is None:
        return None
    return _number(field, value)


def percentage(field: str, value: Any) -> float:
    """Number in [0, 100]. Out-of-range values are rejected, never clamped."""
    value = _number(field, value)
    if not 0 <= value <= 100:
        raise ValidationError(
            field, "out_of_range", f"{field}: must be between 0 and 100, got {value}"
        )
    return value


def timestamp(field: str, value: Any) -> str:
    """Required timestamp, stored as ISO 8601 string."""
    if value is None:
        raise ValidationError(field, "required")
    if not isinstance(value, (str, datetime)):
        raise ValidationError(field, "must_be_timestamp")
    try:
        return parse_timestamp(value).isoformat()
    except ValueError:
        raise ValidationError(field, "must_be_timestamp") from None


def enum_of(enum_cls: type[Enum]) -> Normalizer:
    """Build a normalizer accepting a member or its value."""

    def _normalize(field: str, value: Any) -> Enum:
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            raise ValidationError(
                field, "invalid_choice", f"{field}: must be one of {allowed}"
            ) from None

    # Lets repositories coerce stored values back to members
    _normalize.enum_cls = enum_cls
    return _normalize
