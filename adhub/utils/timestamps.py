"""Timezone-aware timestamp utilities."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utcnow().date()


def local_today(tz_name: str) -> date:
    """Calendar date right now in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()
