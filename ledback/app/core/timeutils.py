"""
Time helpers.

Everything is stored and compared in UTC. Some drivers (SQLite) hand back
naive datetimes; those are treated as UTC.
"""

from datetime import datetime, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC (naive values are assumed UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def later_of(a: Optional[datetime], b: Optional[datetime]) -> Optional[datetime]:
    """``GREATEST(a, b)`` with ``None`` treated as missing."""
    a, b = as_utc(a), as_utc(b)
    if a is None:
        return b
    if b is None:
        return a
    return a if a >= b else b
