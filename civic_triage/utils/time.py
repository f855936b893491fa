"""Time utilities (UTC now, report age)."""
from __future__ import annotations
from datetime import datetime, timezone, timedelta

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime | str | None) -> datetime | None:
    """Coerce a timestamp (or ISO string) to an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite drops tzinfo).
    Unparseable input yields None rather than raising.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def hours_between(start: datetime, end: datetime | None = None) -> float:
    end_ts = end or utc_now()
    delta: timedelta = end_ts - start
    return delta.total_seconds() / 3600

def minutes_between(start: datetime, end: datetime | None = None) -> int:
    return int(hours_between(start, end) * 60)

def resolution_minutes(created_at: datetime | str | None, resolved_at: datetime | str | None) -> float | None:
    """Minutes from creation to resolution; None when either end is unusable or out of order."""
    start, end = as_utc(created_at), as_utc(resolved_at)
    if start is None or end is None or end < start:
        return None
    return (end - start).total_seconds() / 60

__all__ = ["utc_now", "as_utc", "hours_between", "minutes_between", "resolution_minutes"]
