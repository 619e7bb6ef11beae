"""Calendar arithmetic over naive wall-clock datetimes.

Weekday numbers follow the Sunday-based convention used by the stored
recurrence rules: 0=Sunday, 1=Monday, ..., 6=Saturday.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

DAYS_PER_WEEK = 7


def js_weekday(value: date) -> int:
    return value.isoweekday() % DAYS_PER_WEEK


def add_days(value: datetime, days: int) -> datetime:
    # timedelta arithmetic on naive datetimes keeps the wall-clock time.
    return value + timedelta(days=days)


def add_weeks(value: datetime, weeks: int) -> datetime:
    return add_days(value, weeks * DAYS_PER_WEEK)


def add_months(value: datetime, months: int) -> datetime:
    year = value.year + (value.month - 1 + months) // 12
    month = (value.month - 1 + months) % 12 + 1
    day = min(value.day, _days_in_month(year, month))
    return value.replace(year=year, month=month, day=day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999_999)


def start_of_week(value: datetime, week_starts_on: int = 1) -> datetime:
    diff = (js_weekday(value) - week_starts_on) % DAYS_PER_WEEK
    return start_of_day(add_days(value, -diff))


def end_of_week(value: datetime, week_starts_on: int = 1) -> datetime:
    return end_of_day(add_days(start_of_week(value, week_starts_on), DAYS_PER_WEEK - 1))


def is_same_day(left: datetime, right: datetime) -> bool:
    return left.date() == right.date()


def is_this_week(value: datetime, now: datetime, week_starts_on: int = 1) -> bool:
    return start_of_week(now, week_starts_on) <= value <= end_of_week(now, week_starts_on)


def get_next_weekday_occurrence(base: datetime, weekdays: Iterable[int]) -> datetime:
    """Return the first day strictly after ``base`` whose weekday is in ``weekdays``.

    The search wraps into the following week when ``base`` falls on or after
    every selected weekday. An empty selection moves one day forward.
    """
    selected = sorted({day for day in weekdays if 0 <= day < DAYS_PER_WEEK})
    if not selected:
        return add_days(base, 1)

    current = js_weekday(base)
    offset = next((day - current for day in selected if day > current), None)
    if offset is None:
        offset = DAYS_PER_WEEK - current + selected[0]
    if offset <= 0:
        offset = DAYS_PER_WEEK
    return add_days(base, offset)
