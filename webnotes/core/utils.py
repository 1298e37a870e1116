"""
Core Utilities.

Shared utility functions used across the package.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """
    Return current UTC time as a timezone-aware datetime.

    Remote timestamps arrive as ISO 8601 strings with an explicit offset,
    so local timestamps must carry one too or they cannot be compared.

    Returns:
        Current UTC time with tzinfo set
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    """Generate a new opaque entity id."""
    return str(uuid4())
