"""Helpers for the local wall-clock datetimes events are stored in."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from eventhub.utils.settings import get_settings

DateLike = Union[date, datetime]


def local_now() -> datetime:
    """Current naive local time, honouring EVENTHUB_TIMEZONE when set."""
    tz_name = get_settings().timezone
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()


def to_naive_local(value: Optional[datetime]) -> Optional[datetime]:
    """Drop tzinfo after converting aware datetimes into local time."""
    if value is None or value.tzinfo is None:
        return value
    tz_name = get_settings().timezone
    target = ZoneInfo(tz_name) if tz_name else None
    return value.astimezone(target).replace(tzinfo=None)


def start_of_day(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return datetime.combine(value.date(), time.min)
    return datetime.combine(value, time.min)


def end_of_day(value: DateLike) -> datetime:
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def today(now: Optional[datetime] = None) -> datetime:
    """Midnight at the start of the day containing ``now``."""
    return start_of_day(now or local_now())
