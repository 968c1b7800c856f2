"""Calendar arithmetic and date/time literal parsing.

Points in time are plain seconds since EPOCH in the reference time zone of
the evaluation. No time zone conversion is performed anywhere: a literal such
as '2021-02-28 12:00' is taken to already be in that zone.

Months and years have no fixed length, so adding them to a point in time is
done on the calendar fields rather than on the seconds.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TypeVar

# ============================================================================
# Constants
# ============================================================================


EPOCH = datetime(1970, 1, 1)  # Naive, the reference time zone is implied

MONTHS_PER_YEAR = 12

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_DATE_TIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")
_TIME_OF_DAY_FORMATS = ("%H:%M:%S", "%H:%M")

D = TypeVar("D", date, datetime)


def is_leap_year(year: int) -> bool:
    """Gregorian rule: divisible by 4, not by 100, unless by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month (1-12) of a year."""
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def add_months(value: D, months: int) -> D:
    """Add calendar months to a date or datetime.

    A date on the last day of its month lands on the last day of the target
    month. Any other day is clamped to the length of the target month, so the
    result never rolls over into the following month. The time of day is kept.

    Examples:
        >>> add_months(date(2020, 12, 31), 2)
        datetime.date(2021, 2, 28)
        >>> add_months(date(2021, 2, 28), -12)
        datetime.date(2020, 2, 29)
        >>> add_months(date(2000, 2, 29), 1200)
        datetime.date(2100, 2, 28)

    Args:
        value: Date or datetime to start from
        months: Number of months to add, any sign

    Returns:
        A new value of the same type
    """
    # divmod floors, so negative offsets land in the correct earlier year
    year_offset, month_index = divmod(value.month - 1 + months, MONTHS_PER_YEAR)
    year = value.year + year_offset
    month = month_index + 1

    last_day = days_in_month(year, month)
    if value.day == days_in_month(value.year, value.month):
        day = last_day
    else:
        day = min(value.day, last_day)

    return value.replace(year=year, month=month, day=day)


def to_timestamp(value: datetime) -> float:
    """Seconds since EPOCH for a naive datetime."""
    return (value - EPOCH).total_seconds()


def from_timestamp(seconds: float) -> datetime:
    """Naive datetime for a number of seconds since EPOCH."""
    return EPOCH + timedelta(seconds=seconds)


def parse_date_time(text: str) -> datetime | None:
    """Parse YYYY-MM-DD, YYYY-MM-DD HH:MM or YYYY-MM-DD HH:MM:SS.

    Returns:
        The naive datetime, or None if text matches none of the formats
    """
    for date_format in _DATE_TIME_FORMATS:
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            continue
    return None


def parse_time_of_day(text: str) -> float | None:
    """Parse HH:MM or HH:MM:SS.

    Returns:
        Seconds since midnight, or None if text matches none of the formats
    """
    for time_format in _TIME_OF_DAY_FORMATS:
        try:
            parsed = datetime.strptime(text, time_format)
        except ValueError:
            continue
        return float(parsed.hour * 3600 + parsed.minute * 60 + parsed.second)
    return None
