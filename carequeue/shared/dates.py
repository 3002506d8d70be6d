"""Calendar-day helpers.

Appointments are stored as naive UTC datetimes. Everything that groups them by
day (capacity counting, the waiting queue, the dashboard) goes through these
helpers so that all of them agree on where a day starts and ends.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import APP_TIMEZONE

logger = logging.getLogger(__name__)


def get_timezone(name: Optional[str] = None) -> ZoneInfo:
    """Get the business timezone, falling back to UTC for unknown names"""
    name = name or APP_TIMEZONE
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning(f"⚠️ Unknown timezone '{name}', falling back to UTC")
        return ZoneInfo("UTC")


def utcnow() -> datetime:
    """Current time as naive UTC, matching the storage format"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(value: datetime) -> datetime:
    """
    Normalize an incoming datetime to naive UTC.

    Aware values are converted; naive values are read as business-local time.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_timezone())
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_date(stored: datetime) -> date:
    """Business-local calendar day of a stored (naive UTC) datetime"""
    return stored.replace(tzinfo=timezone.utc).astimezone(get_timezone()).date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """
    Storage-time range covering one business-local day.

    Returns a half-open interval [start, end) so DST days of 23 or 25 hours
    are handled without gaps or overlap.
    """
    tz = get_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def today() -> date:
    """Today's date in the business timezone"""
    return datetime.now(get_timezone()).date()


def as_utc(stored: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a stored datetime so responses carry an explicit offset"""
    if stored is None:
        return None
    return stored.replace(tzinfo=timezone.utc)
