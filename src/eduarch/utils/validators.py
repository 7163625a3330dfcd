"""Data validation helpers.

Conventions:
- Timestamps are stored as ISO 8601 strings in UTC.
- Enumerations are stored by value ("TEACHER", "DRAFT", ...).
- Entity ids are opaque strings: "{prefix}_{12 hex chars}".
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_id(prefix: str) -> str:
    """Generate a new entity id, e.g. "crs_3f2a9c0d41be"."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def utc_now() -> str:
    """Current time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def validate_email(email: str) -> bool:
    """Check email format.

    Args:
        email: Email address to validate

    Returns:
        True if the address looks like local@domain.tld
    """
    return bool(EMAIL_PATTERN.match(email))


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO 8601 string (or datetime) into an aware datetime.

    Naive values are taken as UTC so that mixed inputs stay comparable.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

