"""
Calendar helpers operating on an already resolved datetime.

All helpers return new datetimes and keep the ``tzinfo`` of their input, so
a UTC value stays UTC and a local value stays local.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Tuple

from dateutil.relativedelta import relativedelta, MO

from spanparser.calendar_math import is_leap_year

_ONE_MICROSECOND = timedelta(microseconds=1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimeUnit(Enum):
    """Granularity for :func:`difference_in`."""
    YEARS = "YEARS"
    MONTHS = "MONTHS"
    WEEKS = "WEEKS"
    DAYS = "DAYS"
    HOURS = "HOURS"
    MINUTES = "MINUTES"
    SECONDS = "SECONDS"
    MILLISECONDS = "MILLISECONDS"
    MICROSECONDS = "MICROSECONDS"


# =============================================================================
# Truncation
# =============================================================================

def floor_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Last microsecond of the day."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(dt: datetime) -> datetime:
    """Monday midnight of the ISO week containing ``dt``."""
    return start_of_day(dt + relativedelta(weekday=MO(-1)))


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt.replace(day=1))


def end_of_month(dt: datetime) -> datetime:
    return start_of_month(dt) + relativedelta(months=1) - _ONE_MICROSECOND


def quarter(dt: datetime) -> int:
    return (dt.month - 1) // 3 + 1


def start_of_quarter(dt: datetime) -> datetime:
    return start_of_day(dt.replace(month=3 * (quarter(dt) - 1) + 1, day=1))


def end_of_quarter(dt: datetime) -> datetime:
    return start_of_quarter(dt) + relativedelta(months=3) - _ONE_MICROSECOND


def start_of_year(dt: datetime) -> datetime:
    return start_of_day(dt.replace(month=1, day=1))


def end_of_year(dt: datetime) -> datetime:
    return end_of_day(dt.replace(month=12, day=31))


# =============================================================================
# Predicates
# =============================================================================

def iso_week(dt: datetime) -> Tuple[int, int]:
    """(ISO year, ISO week number). Dec 30 2024 is in week 1 of 2025."""
    iso = dt.isocalendar()
    return (iso[0], iso[1])


def is_weekend(dt: datetime) -> bool:
    return dt.weekday() >= 5


def is_weekday(dt: datetime) -> bool:
    return not is_weekend(dt)


def is_leap_day(dt: datetime) -> bool:
    return dt.month == 2 and dt.day == 29


def is_leap_month(dt: datetime) -> bool:
    return dt.month == 2 and is_leap_year(dt.year)


def is_same_day(a: datetime, b: datetime) -> bool:
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_same_month(a: datetime, b: datetime) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def is_same_year(a: datetime, b: datetime) -> bool:
    return a.year == b.year


def is_before_or_same(a: datetime, b: datetime) -> bool:
    return a <= b


def is_after_or_same(a: datetime, b: datetime) -> bool:
    return a >= b


# =============================================================================
# Distances
# =============================================================================

def seconds_since_epoch(dt: datetime) -> int:
    """Whole seconds since the Unix epoch. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(seconds=1)


_FIXED_UNITS = {
    TimeUnit.WEEKS: timedelta(weeks=1),
    TimeUnit.DAYS: timedelta(days=1),
    TimeUnit.HOURS: timedelta(hours=1),
    TimeUnit.MINUTES: timedelta(minutes=1),
    TimeUnit.SECONDS: timedelta(seconds=1),
    TimeUnit.MILLISECONDS: timedelta(milliseconds=1),
    TimeUnit.MICROSECONDS: timedelta(microseconds=1),
}


def difference_in(a: datetime, b: datetime, unit: TimeUnit) -> int:
    """
    Absolute distance between ``a`` and ``b`` in whole ``unit``.

    Weeks and smaller units divide the exact elapsed time. Months and years
    compare calendar components only, so Jan 31 and Feb 1 are one month
    apart.
    """
    if unit == TimeUnit.YEARS:
        return abs(a.year - b.year)
    if unit == TimeUnit.MONTHS:
        return abs((a.year * 12 + a.month) - (b.year * 12 + b.month))
    return abs(a - b) // _FIXED_UNITS[unit]
