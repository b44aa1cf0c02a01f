"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system are timezone-aware UTC. SQLite (used in
tests) hands back naive datetimes, so repositories normalize with
ensure_utc at the persistence boundary.
"""

import math
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def seconds_until(moment: datetime, now: datetime) -> int:
    """Whole seconds from now until moment, rounded down; negative when past."""
    return math.floor((ensure_utc(moment) - ensure_utc(now)).total_seconds())
