"""Date/time helpers.

Always operate on timezone-aware UTC datetimes.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Preferred replacement for `datetime.now(UTC)`.

    Returns a timezone-aware datetime in UTC.
    """
    return datetime.now(UTC)


def unix_millis(dt: datetime | None = None) -> int:
    """Milliseconds since the epoch for *dt* (defaults to now)."""
    return int((dt or utcnow()).timestamp() * 1000)
