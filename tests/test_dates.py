from __future__ import annotations

from datetime import datetime

from ticktask.domain.dates import (
    add_days,
    add_months,
    add_weeks,
    end_of_day,
    end_of_week,
    get_next_weekday_occurrence,
    is_this_week,
    js_weekday,
    start_of_week,
)


def test_add_days_crosses_year_and_keeps_clock_time() -> None:
    assert add_days(datetime(2025, 12, 31, 17, 30), 1) == datetime(2026, 1, 1, 17, 30)
    assert add_days(datetime(2026, 3, 1, 8, 0), -1) == datetime(2026, 2, 28, 8, 0)


def test_add_weeks() -> None:
    assert add_weeks(datetime(2026, 1, 14, 9, 0), 2) == datetime(2026, 1, 28, 9, 0)


def test_add_months_clamps_to_last_day() -> None:
    assert add_months(datetime(2024, 1, 31, 10, 0), 1) == datetime(2024, 2, 29, 10, 0)
    assert add_months(datetime(2023, 1, 31, 10, 0), 1) == datetime(2023, 2, 28, 10, 0)
    assert add_months(datetime(2026, 3, 31), 1) == datetime(2026, 4, 30)


def test_add_months_rolls_year() -> None:
    assert add_months(datetime(2025, 12, 15), 1) == datetime(2026, 1, 15)
    assert add_months(datetime(2026, 1, 15), -1) == datetime(2025, 12, 15)
    assert add_months(datetime(2025, 11, 30), 3) == datetime(2026, 2, 28)


def test_js_weekday_is_sunday_based() -> None:
    assert js_weekday(datetime(2026, 1, 18)) == 0
    assert js_weekday(datetime(2026, 1, 19)) == 1
    assert js_weekday(datetime(2026, 1, 17)) == 6


def test_week_bounds_default_to_monday() -> None:
    wednesday = datetime(2026, 1, 14, 15, 45)
    assert start_of_week(wednesday) == datetime(2026, 1, 12)
    assert end_of_week(wednesday) == datetime(2026, 1, 18, 23, 59, 59, 999_999)


def test_week_bounds_with_sunday_start() -> None:
    wednesday = datetime(2026, 1, 14, 15, 45)
    assert start_of_week(wednesday, 0) == datetime(2026, 1, 11)
    assert end_of_week(wednesday, 0) == end_of_day(datetime(2026, 1, 17))


def test_start_of_week_on_the_start_day_itself() -> None:
    sunday = datetime(2026, 1, 18, 12, 0)
    assert start_of_week(sunday) == datetime(2026, 1, 12)
    assert start_of_week(sunday, 0) == datetime(2026, 1, 18)


def test_is_this_week() -> None:
    now = datetime(2026, 1, 14, 9, 0)
    assert is_this_week(datetime(2026, 1, 18, 23, 0), now)
    assert not is_this_week(datetime(2026, 1, 19, 0, 0), now)
    assert not is_this_week(datetime(2026, 1, 11, 23, 59), now)


def test_next_weekday_later_this_week() -> None:
    wednesday = datetime(2026, 1, 14, 9, 0)
    assert get_next_weekday_occurrence(wednesday, {1, 3, 5}) == datetime(2026, 1, 16, 9, 0)


def test_next_weekday_never_returns_same_day() -> None:
    wednesday = datetime(2026, 1, 14, 9, 0)
    assert get_next_weekday_occurrence(wednesday, {3}) == datetime(2026, 1, 21, 9, 0)


def test_next_weekday_wraps_to_next_week() -> None:
    friday = datetime(2026, 1, 16, 17, 0)
    assert get_next_weekday_occurrence(friday, {1, 2, 3, 4, 5}) == datetime(2026, 1, 19, 17, 0)
    saturday = datetime(2026, 1, 17)
    assert get_next_weekday_occurrence(saturday, {0}) == datetime(2026, 1, 18)


def test_next_weekday_empty_set_moves_one_day() -> None:
    assert get_next_weekday_occurrence(datetime(2026, 1, 14), set()) == datetime(2026, 1, 15)


def test_next_weekday_strictly_increases_when_chained() -> None:
    current = datetime(2026, 1, 14, 9, 0)
    for weekdays in ({1, 3, 5}, {0}, {6}, {0, 6}, set(range(7))):
        value = current
        for _ in range(10):
            following = get_next_weekday_occurrence(value, weekdays)
            assert following > value
            assert js_weekday(following) in weekdays
            value = following
