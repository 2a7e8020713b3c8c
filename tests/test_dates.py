from datetime import date

import pytest

from datebook.core.calendar.dates import (
    InvalidDateError,
    add_days,
    add_months,
    add_weeks,
    compare,
    day_of_week,
    end_of_month,
    end_of_week,
    is_same_day,
    is_today,
    iter_days,
    parse_iso,
    safe_parse_iso,
    start_of_month,
    start_of_week,
    time_to_minutes,
    to_iso,
)


def test_add_days_and_weeks_cross_month_and_year():
    assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)
    assert add_days(date(2024, 3, 1), -1) == date(2024, 2, 29)
    assert add_weeks(date(2025, 1, 27), 1) == date(2025, 2, 3)


def test_add_months_overflows_by_default():
    # 2023 не високосный: 31 февраля = 3 марта
    assert add_months(date(2023, 1, 31), 1) == date(2023, 3, 3)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 3, 2)
    assert add_months(date(2024, 3, 31), 1) == date(2024, 5, 1)


def test_add_months_clamp_pins_to_month_end():
    assert add_months(date(2023, 1, 31), 1, clamp=True) == date(2023, 2, 28)
    assert add_months(date(2024, 1, 31), 1, clamp=True) == date(2024, 2, 29)


def test_add_months_across_years():
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_months(date(2025, 2, 15), -3) == date(2024, 11, 15)


def test_compare():
    assert compare(date(2025, 1, 1), date(2025, 1, 2)) == -1
    assert compare(date(2025, 1, 2), date(2025, 1, 2)) == 0
    assert compare(date(2025, 1, 3), date(2025, 1, 2)) == 1


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2025, 1, 5)) == 0  # Sunday
    assert day_of_week(date(2025, 1, 1)) == 3  # Wednesday
    assert day_of_week(date(2025, 1, 4)) == 6  # Saturday


def test_iso_round_trip_and_strict_parsing():
    assert to_iso(date(2025, 3, 7)) == "2025-03-07"
    assert parse_iso("2025-03-07") == date(2025, 3, 7)
    for bad in ("2023-02-30", "2025-3-7", "07.03.2025", "", "2025-03-07T10:00"):
        with pytest.raises(InvalidDateError):
            parse_iso(bad)
    assert safe_parse_iso("2023-02-30") is None
    assert safe_parse_iso(None) is None


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("9:30") == 570
    assert time_to_minutes("23:59") == 1439
    for bad in (None, "", "24:00", "12:60", "noon", "12:5"):
        assert time_to_minutes(bad) is None


def test_week_boundaries_default_sunday():
    wed = date(2025, 1, 1)
    assert start_of_week(wed) == date(2024, 12, 29)
    assert end_of_week(wed) == date(2025, 1, 4)
    sunday = date(2025, 1, 5)
    assert start_of_week(sunday) == sunday


def test_week_boundaries_monday_start():
    wed = date(2025, 1, 1)
    assert start_of_week(wed, week_start=1) == date(2024, 12, 30)
    assert end_of_week(wed, week_start=1) == date(2025, 1, 5)
    sunday = date(2025, 1, 5)
    assert start_of_week(sunday, week_start=1) == date(2024, 12, 30)


def test_month_boundaries():
    assert start_of_month(date(2024, 2, 17)) == date(2024, 2, 1)
    assert end_of_month(date(2024, 2, 17)) == date(2024, 2, 29)
    assert end_of_month(date(2023, 2, 1)) == date(2023, 2, 28)
    assert end_of_month(date(2025, 12, 5)) == date(2025, 12, 31)


def test_iter_days_inclusive():
    days = list(iter_days(date(2024, 12, 30), date(2025, 1, 2)))
    assert days == [date(2024, 12, 30), date(2024, 12, 31), date(2025, 1, 1), date(2025, 1, 2)]
    assert list(iter_days(date(2025, 1, 2), date(2025, 1, 1))) == []


def test_same_day_and_today():
    assert is_same_day(date(2025, 1, 1), date(2025, 1, 1))
    assert not is_same_day(date(2025, 1, 1), date(2025, 1, 2))
    assert is_today(date(2025, 6, 1), today=date(2025, 6, 1))
    assert not is_today(date(2025, 6, 2), today=date(2025, 6, 1))
    assert is_today(date.today())


def test_add_months_leap_day_and_negative_steps():
    assert add_months(date(2024, 2, 29), 12) == date(2025, 3, 1)
    assert add_months(date(2024, 2, 29), 12, clamp=True) == date(2025, 2, 28)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 3, 2)
    assert add_months(date(2024, 3, 31), -1, clamp=True) == date(2024, 2, 29)
