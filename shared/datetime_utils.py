"""
Date/time helpers, framework-agnostic.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as a timezone-aware UTC datetime.

    Naive datetimes (as returned by MongoDB without ``tz_aware``) are assumed
    to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_timestamp(value: Optional[datetime]) -> Optional[int]:
    """Convert *value* to Unix epoch seconds, or ``None``."""
    value = ensure_utc(value)
    if value is None:
        return None
    return int(value.timestamp())
