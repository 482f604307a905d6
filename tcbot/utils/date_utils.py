"""
UTC date helpers shared by the stats services and schedulers.

Timestamps are stored as naive UTC datetimes.
"""

import calendar
from datetime import datetime, date, timedelta

import pytz


def utc_now() -> datetime:
    """Current time in UTC as a naive datetime."""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def is_last_day_of_month(day: date) -> bool:
    return day.day == calendar.monthrange(day.year, day.month)[1]


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def start_of_month(year: int, month: int) -> datetime:
    return datetime(year, month, 1)


def start_of_next_month(year: int, month: int) -> datetime:
    if month == 12:
        return datetime(year + 1, 1, 1)
    return datetime(year, month + 1, 1)


def end_of_day(day: date) -> datetime:
    return start_of_day(day) + timedelta(days=1)
