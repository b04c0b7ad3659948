"""UTC helpers.

SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
columns, so anything compared against "now" goes through ``as_utc`` first.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes, convert aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_past(dt: datetime | None, now: datetime | None = None) -> bool:
    """True if ``dt`` is set and strictly before ``now``. ``None`` never expires."""
    if dt is None:
        return False
    if now is None:
        now = utcnow()
    return as_utc(dt) < as_utc(now)


def days_from_now(days: int, now: datetime | None = None) -> datetime:
    if now is None:
        now = utcnow()
    return now + timedelta(days=days)
