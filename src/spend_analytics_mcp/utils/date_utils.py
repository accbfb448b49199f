"""
Date utilities for filter periods and local-time month bucketing.
"""

import calendar
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Tuple


def parse_period(period: str) -> Tuple[date, date]:
    """
    Parse a period shorthand into inclusive (start_date, end_date) bounds.

    Supported periods:
    - "this_month", "last_month"
    - "this_year", "last_year"
    - "last_7_days", "last_30_days", "last_90_days"
    - "ytd" (year to date)

    Raises:
        ValueError: If period is not recognized
    """
    today = datetime.now().date()

    if period == "this_month":
        return get_month_range(today.year, today.month)

    if period == "last_month":
        last_of_prev = today.replace(day=1) - timedelta(days=1)
        return get_month_range(last_of_prev.year, last_of_prev.month)

    if period == "this_year":
        return date(today.year, 1, 1), date(today.year, 12, 31)

    if period == "last_year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    rolling = {"last_7_days": 7, "last_30_days": 30, "last_90_days": 90}
    if period in rolling:
        return today - timedelta(days=rolling[period]), today

    if period == "ytd":
        return date(today.year, 1, 1), today

    raise ValueError(f"Unknown period: {period}")


def default_filter_range() -> Tuple[date, date]:
    """First day of the current month through today."""
    today = datetime.now().date()
    return today.replace(day=1), today


def get_month_range(year: int, month: int) -> Tuple[date, date]:
    """
    Get the first and last calendar day of a month.

    Raises:
        ValueError: If month is not in valid range (1-12)
    """
    validate_month(month)
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def validate_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")


def local_year_month(ts: datetime, tz: Optional[tzinfo] = None) -> Tuple[int, int]:
    """
    Calendar (year, month) of a timestamp in the viewer's time zone.

    Aware timestamps are converted to ``tz`` (the system local zone when
    omitted). Naive timestamps are already local and are read as-is.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.year, ts.month


def in_local_month(
    ts: datetime, year: int, month: int, tz: Optional[tzinfo] = None
) -> bool:
    return local_year_month(ts, tz) == (year, month)
