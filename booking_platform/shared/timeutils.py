"""
Time helpers.

Appointment timestamps are stored as naive UTC datetimes; wall-clock
schedule times are local to the tenant timezone.
"""

from datetime import date, datetime, time, timezone

import pytz


def utcnow() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize an aware or naive-UTC datetime to naive UTC"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_to_utc(target_date: date, wall_clock: time, tz_name: str) -> datetime:
    """Interpret ``wall_clock`` on ``target_date`` in ``tz_name`` and return naive UTC"""
    tz = pytz.timezone(tz_name or "UTC")
    local_dt = tz.localize(datetime.combine(target_date, wall_clock))
    return local_dt.astimezone(pytz.UTC).replace(tzinfo=None)


def utc_to_local(value: datetime, tz_name: str) -> datetime:
    """Naive UTC to an aware datetime in ``tz_name``"""
    tz = pytz.timezone(tz_name or "UTC")
    return pytz.UTC.localize(to_utc_naive(value)).astimezone(tz)
