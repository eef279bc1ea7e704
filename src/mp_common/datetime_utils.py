"""Timestamps for posts, bookings and boosts.

Everything the core compares or serializes is timezone-aware UTC. Naive
values (only ever produced by hand-built rows in tests or scripts) are taken
to be UTC already.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat_or_none(value: datetime | None) -> str | None:
    return ensure_utc(value).isoformat() if value else None
