"""
Time helpers

Timestamps are stored as naive UTC. Calendar-day decisions (days until
service, reminder dedup) are made in REMINDER_TIMEZONE.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from primecare.core.config import settings


def utcnow() -> datetime:
    """Current time as naive UTC, matching what the database stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def reminder_zone() -> ZoneInfo:
    return ZoneInfo(settings.REMINDER_TIMEZONE)


def to_local(value: datetime) -> datetime:
    """Convert a stored (naive UTC) or aware datetime into the reminder zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(reminder_zone())


def local_date(value: Optional[datetime] = None) -> date:
    """Calendar date of `value` (default: now) in the reminder zone."""
    return to_local(value or utcnow()).date()


def day_bounds_utc(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """[start, end) of the current reminder-zone calendar day as naive UTC."""
    day = local_date(now)
    zone = reminder_zone()
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = start + timedelta(days=1)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a query parameter to the naive UTC the database stores"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
