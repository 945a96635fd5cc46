# src/dbright_site/db/time.py
"""Time utilities for database models and aggregate queries."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def local_midnight(timezone_name: str, now: datetime | None = None) -> datetime:
    """Return the most recent midnight in `timezone_name`, expressed in UTC."""
    tz = ZoneInfo(timezone_name)
    local_now = (now or utcnow()).astimezone(tz)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(UTC)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """Return the UTC instant `days` days before `now`."""
    return (now or utcnow()) - timedelta(days=days)
