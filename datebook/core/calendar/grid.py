# datebook/core/calendar/grid.py
"""
Сетка дней для видов «месяц», «неделя» и «день».

События раскладываются по ячейкам только по точному совпадению
``Event.date`` с ISO-датой ячейки. Событие с битой датой не попадает
ни в одну ячейку.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import DefaultDict, Iterable, List, Optional

from datebook.core.events.queries import sort_events
from datebook.core.events.schemas import CalendarDay, Event
from .dates import (
    SUNDAY,
    end_of_month,
    end_of_week,
    is_today,
    iter_days,
    start_of_month,
    start_of_week,
    to_iso,
)

log = logging.getLogger(__name__)

SIX_WEEKS = 42


def _bucket_by_date(pool: Iterable[Event]) -> DefaultDict[str, List[Event]]:
    buckets: DefaultDict[str, List[Event]] = defaultdict(list)
    for ev in pool:
        buckets[ev.date].append(ev)
    return buckets


def _cells(
    days: Iterable[date],
    reference: date,
    buckets: DefaultDict[str, List[Event]],
    today: Optional[date],
) -> List[CalendarDay]:
    # «Сегодня» фиксируем один раз на весь вызов, иначе около полуночи ячеек может стать две
    today = today or date.today()
    return [
        CalendarDay(
            date=d,
            is_current_month=(d.year, d.month) == (reference.year, reference.month),
            is_today=is_today(d, today),
            events=list(buckets.get(to_iso(d), [])),
        )
        for d in days
    ]


def month_grid_range(
    reference: date, week_start: int = SUNDAY, six_weeks: bool = False
) -> tuple[date, date]:
    """Первый и последний день сетки месяца (включительно)."""
    grid_start = start_of_week(start_of_month(reference), week_start)
    if six_weeks:
        return grid_start, grid_start + timedelta(days=SIX_WEEKS - 1)
    return grid_start, end_of_week(end_of_month(reference), week_start)


def build_month_grid(
    reference: date,
    pool: Iterable[Event],
    *,
    week_start: int = SUNDAY,
    today: Optional[date] = None,
    six_weeks: bool = False,
) -> List[CalendarDay]:
    """
    Сетка месяца, содержащего ``reference``, дополненная до целых недель.

    Args:
        reference (date): Любой день нужного месяца.
        pool (Iterable[Event]): Все события (не изменяются).
        week_start (int): Первый день недели, 0=Sunday.
        today (Optional[date]): Подмена «сегодня» (для тестов).
        six_weeks (bool): Всегда отдавать 42 ячейки, добивая днями следующего месяца.

    Returns:
        List[CalendarDay]: Дни по возрастанию; длина кратна 7 (28, 35 или 42).
    """
    grid_start, grid_end = month_grid_range(reference, week_start, six_weeks)
    buckets = _bucket_by_date(pool)
    days = _cells(iter_days(grid_start, grid_end), reference, buckets, today)
    log.debug("Built month grid for %s: %s..%s (%d cells)", reference, grid_start, grid_end, len(days))
    return days


def build_week(
    reference: date,
    pool: Iterable[Event],
    *,
    week_start: int = SUNDAY,
    today: Optional[date] = None,
) -> List[CalendarDay]:
    """7 дней, начиная с ``start_of_week(reference)``."""
    first = start_of_week(reference, week_start)
    buckets = _bucket_by_date(pool)
    return _cells(iter_days(first, first + timedelta(days=6)), reference, buckets, today)


def build_day(
    reference: date,
    pool: Iterable[Event],
    *,
    today: Optional[date] = None,
) -> CalendarDay:
    """Один день; события отсортированы: сначала на весь день, затем по времени."""
    iso = to_iso(reference)
    return CalendarDay(
        date=reference,
        is_current_month=True,
        is_today=is_today(reference, today),
        events=sort_events(ev for ev in pool if ev.date == iso),
    )


__all__ = ["SIX_WEEKS", "month_grid_range", "build_month_grid", "build_week", "build_day"]
