"""Timestamp helpers for PostgREST ISO-8601 values."""

from datetime import datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a store timestamp into an aware datetime.

    PostgREST returns e.g. "2026-01-05T10:00:00.123456+00:00"; some clients
    send a trailing "Z". Naive values are treated as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(expires_at: Union[str, datetime, None], now: Optional[datetime] = None) -> bool:
    """True when now is strictly past expires_at."""
    expiry = parse_timestamp(expires_at)
    if expiry is None:
        return False
    return (now or utc_now()) > expiry
