"""
UTC time helpers

SQLite hands timestamps back without tzinfo; everything stored is UTC, so
naive values are read as UTC before comparing with aware ones.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """A missing expiry never expires"""
    if expires_at is None:
        return False
    return as_utc(expires_at) < (now or utc_now())
