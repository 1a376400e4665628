"""Datetime utilities for timezone-aware timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def to_store_time(value: datetime) -> datetime:
    """Convert an aware datetime to the store's local timezone (Settings.TIMEZONE)."""
    return value.astimezone(ZoneInfo(get_settings().TIMEZONE))


def store_now() -> datetime:
    """Current time in the store's local timezone."""
    return to_store_time(utc_now())


def start_of_store_day(now: datetime | None = None) -> datetime:
    """Midnight of the store-local day containing ``now``, as UTC."""
    local = to_store_time(now or utc_now())
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
