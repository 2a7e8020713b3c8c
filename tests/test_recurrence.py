import itertools
from datetime import datetime

import pytest
from pydantic import ValidationError

from datebook.core.calendar.dates import day_of_week, parse_iso
from datebook.core.events.recurrence import describe, expand, is_recurring, next_occurrence
from datebook.core.events.schemas import (
    MAX_RECURRENCE_COUNT,
    CustomRecurrence,
    DailyRecurrence,
    Event,
    EventCreate,
    EventUpdate,
    MonthlyRecurrence,
    NoRecurrence,
    WeeklyRecurrence,
)

CREATED = datetime(2024, 12, 1, 8, 0)
NOW = datetime(2025, 1, 1, 12, 0)


def make_event(date="2025-01-01", recurrence=None, **kwargs) -> Event:
    data = dict(
        id="tpl-1",
        title="Standup",
        date=date,
        start_time="09:00",
        end_time="09:30",
        recurrence=recurrence,
        created_at=CREATED,
        updated_at=CREATED,
    )
    data.update(kwargs)
    return Event(**data)


def dates_of(events):
    return [ev.date for ev in events]


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"occ-{next(counter)}"


def test_no_recurrence_returns_template_only():
    plain = make_event()
    assert expand(plain) == [plain]
    explicit_none = make_event(recurrence={"type": "none", "count": 5})
    assert expand(explicit_none) == [explicit_none]


def test_daily_with_count_yields_exactly_count():
    template = make_event(recurrence={"type": "daily", "count": 5})
    result = expand(template, now=NOW)
    assert dates_of(result) == ["2025-01-01", "2025-01-02", "2025-01-03", "2025-01-04", "2025-01-05"]


def test_end_date_bounds_expansion_inclusively():
    template = make_event(recurrence={"type": "daily", "count": 10, "endDate": "2025-01-04"})
    result = expand(template, now=NOW)
    assert dates_of(result) == ["2025-01-01", "2025-01-02", "2025-01-03", "2025-01-04"]


def test_malformed_end_date_is_ignored():
    template = make_event(recurrence={"type": "daily", "count": 3, "endDate": "not-a-date"})
    assert len(expand(template, now=NOW)) == 3


def test_default_cap_without_count():
    template = make_event(recurrence={"type": "daily"})
    assert len(expand(template, now=NOW)) == 100
    assert len(expand(template, now=NOW, default_cap=7)) == 7


def test_weekly_interval():
    template = make_event(recurrence={"type": "weekly", "interval": 2, "count": 3})
    assert dates_of(expand(template, now=NOW)) == ["2025-01-01", "2025-01-15", "2025-01-29"]


def test_monthly_overflow_and_clamp():
    template = make_event(date="2025-01-31", recurrence={"type": "monthly", "count": 3})
    assert dates_of(expand(template, now=NOW)) == ["2025-01-31", "2025-03-03", "2025-04-03"]
    clamped = expand(template, now=NOW, clamp_months=True)
    assert dates_of(clamped) == ["2025-01-31", "2025-02-28", "2025-03-28"]


def test_custom_weekdays_only_generates_listed_days():
    # 2025-01-06 - понедельник
    template = make_event(date="2025-01-06", recurrence={"type": "custom", "daysOfWeek": [1, 3, 5], "count": 6})
    result = expand(template, now=NOW)
    assert dates_of(result) == [
        "2025-01-06", "2025-01-08", "2025-01-10", "2025-01-13", "2025-01-15", "2025-01-17",
    ]
    for ev in result[1:]:
        assert day_of_week(parse_iso(ev.date)) in {1, 3, 5}


def test_custom_template_kept_even_off_pattern():
    # 2025-01-01 - среда, правило только по понедельникам
    template = make_event(recurrence={"type": "custom", "daysOfWeek": [1], "count": 3})
    assert dates_of(expand(template, now=NOW)) == ["2025-01-01", "2025-01-06", "2025-01-13"]


def test_custom_ignores_interval_when_weekdays_given():
    template = make_event(
        recurrence={"type": "custom", "daysOfWeek": [1], "interval": 3, "count": 3}
    )
    assert dates_of(expand(template, now=NOW)) == ["2025-01-01", "2025-01-06", "2025-01-13"]


def test_custom_without_weekdays_steps_by_interval():
    template = make_event(recurrence={"type": "custom", "interval": 2, "count": 3})
    assert dates_of(expand(template, now=NOW)) == ["2025-01-01", "2025-01-03", "2025-01-05"]


def test_custom_drops_out_of_range_weekdays():
    template = make_event(recurrence={"type": "custom", "daysOfWeek": [1, 9], "count": 2})
    assert dates_of(expand(template, now=NOW)) == ["2025-01-01", "2025-01-06"]


def test_unknown_type_behaves_like_none():
    template = make_event(recurrence={"type": "yearly", "count": 3})
    assert isinstance(template.recurrence, NoRecurrence)
    assert expand(template) == [template]


def test_malformed_template_date_is_not_expanded():
    template = make_event(date="2025-02-30", recurrence={"type": "daily", "count": 3})
    assert expand(template) == [template]


def test_occurrences_share_series_and_have_fresh_ids():
    template = make_event(recurrence={"type": "daily", "count": 4})
    result = expand(template, now=NOW, id_factory=sequential_ids())

    assert result[0].id == template.id
    assert [ev.id for ev in result[1:]] == ["occ-1", "occ-2", "occ-3"]
    assert len({ev.id for ev in result}) == len(result)
    assert {ev.series_id for ev in result} == {template.id}

    for ev in result[1:]:
        assert ev.created_at == NOW
        assert ev.updated_at == NOW
        assert ev.title == template.title
        assert ev.start_time == template.start_time
        assert ev.recurrence == template.recurrence


def test_expansion_keeps_existing_series_id_and_template_untouched():
    template = make_event(series_id="series-7", recurrence={"type": "daily", "count": 2})
    result = expand(template, now=NOW)
    assert {ev.series_id for ev in result} == {"series-7"}

    fresh = make_event(recurrence={"type": "daily", "count": 2})
    expand(fresh, now=NOW)
    assert fresh.series_id is None


def test_dates_are_strictly_ascending():
    template = make_event(recurrence={"type": "custom", "daysOfWeek": [0, 6], "count": 10})
    result = dates_of(expand(template, now=NOW))
    assert result == sorted(result)
    assert len(set(result)) == len(result)


def test_next_occurrence_dispatch():
    start = parse_iso("2025-01-31")
    assert next_occurrence(start, DailyRecurrence(interval=2)) == parse_iso("2025-02-02")
    assert next_occurrence(start, WeeklyRecurrence()) == parse_iso("2025-02-07")
    assert next_occurrence(start, MonthlyRecurrence(), clamp_months=True) == parse_iso("2025-02-28")
    assert next_occurrence(start, NoRecurrence()) is None


def test_is_recurring_and_describe():
    assert not is_recurring(make_event())
    assert not is_recurring(make_event(recurrence={"type": "none"}))
    assert is_recurring(make_event(recurrence={"type": "weekly"}))

    assert describe(DailyRecurrence()) == "Daily"
    assert describe(WeeklyRecurrence(interval=2)) == "Every 2 weeks"
    assert describe(MonthlyRecurrence(interval=3)) == "Every 3 months"
    assert describe(CustomRecurrence(days_of_week=[5, 1])) == "Every Mon, Fri"
    assert describe(CustomRecurrence()) == "Custom recurrence"
    assert describe(None) == "No recurrence"


def test_occurrences_do_not_share_pattern_with_template():
    template = make_event(recurrence={"type": "custom", "daysOfWeek": [1, 3], "count": 3})
    result = expand(template, now=NOW)

    assert result[1].recurrence is not template.recurrence
    result[2].recurrence.days_of_week.append(5)
    result[0].recurrence.days_of_week.append(6)

    assert template.recurrence.days_of_week == [1, 3]
    assert result[1].recurrence.days_of_week == [1, 3]


def test_count_above_limit_rejected_at_input():
    too_many = {"type": "daily", "count": MAX_RECURRENCE_COUNT + 1}
    with pytest.raises(ValidationError):
        EventCreate(title="Standup", date="2025-01-01", recurrence=too_many)
    with pytest.raises(ValidationError):
        EventUpdate(recurrence=too_many)

    at_limit = EventCreate(
        title="Standup", date="2025-01-01", recurrence={"type": "daily", "count": MAX_RECURRENCE_COUNT}
    )
    assert at_limit.recurrence.count == MAX_RECURRENCE_COUNT
