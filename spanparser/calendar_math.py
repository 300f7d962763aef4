"""
Calendar arithmetic primitives.

The day-length table and the leap-year rule below are used for both year and
month addition, so Feb 29 clamping behaves the same way in both.
"""

from datetime import datetime, timedelta

DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` (1-12) of ``year``."""
    if month == 2 and is_leap_year(year):
        return 29
    return DAYS_IN_MONTH[month - 1]


def add_years(dt: datetime, years: int) -> datetime:
    """
    Add calendar years, clamping the day to the end of the target month.

    Only Feb 29 is affected: it becomes Feb 28 in a common target year.
    """
    if years == 0:
        return dt
    year = dt.year + years
    day = min(dt.day, days_in_month(year, dt.month))
    return dt.replace(year=year, day=day)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the end of the target month.

    Examples:
        Jan 31 2023 + 1 month -> Feb 28 2023
        Jan 29 2024 + 1 month -> Feb 29 2024
    """
    if months == 0:
        return dt
    year, month_index = divmod(dt.year * 12 + (dt.month - 1) + months, 12)
    month = month_index + 1
    day = min(dt.day, days_in_month(year, month))
    return dt.replace(year=year, month=month, day=day)


def add_days(dt: datetime, days: int) -> datetime:
    if days == 0:
        return dt
    return dt + timedelta(days=days)
