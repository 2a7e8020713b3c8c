# datebook/core/events/queries.py
"""Read-only helpers over an event pool: sorting, search, upcoming list."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from datebook.core.calendar.dates import safe_parse_iso, time_to_minutes, to_iso
from .schemas import Event


def _sort_key(event: Event) -> tuple:
    # Сначала дата, внутри дня: события на весь день, потом по времени начала
    minutes = time_to_minutes(event.start_time)
    return (event.date, minutes is not None, minutes or 0)


def sort_events(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=_sort_key)


def upcoming_events(
    pool: Iterable[Event],
    now: Optional[datetime] = None,
    limit: int = 5,
) -> list[Event]:
    """
    Ближайшие события начиная с ``now``.

    Сегодняшние события на весь день входят всегда, сегодняшние с временем
    только если ещё не начались. Всё, что позже сегодняшнего дня, входит.
    """
    now = now or datetime.now()
    today = to_iso(now.date())
    now_minutes = now.hour * 60 + now.minute

    def _is_upcoming(ev: Event) -> bool:
        if safe_parse_iso(ev.date) is None:
            return False
        if ev.date == today:
            start = time_to_minutes(ev.start_time)
            return start is None or start > now_minutes
        return ev.date > today

    return sort_events(ev for ev in pool if _is_upcoming(ev))[:limit]


def filter_events(
    pool: Iterable[Event],
    query: Optional[str] = None,
    category: Optional[str] = None,
) -> list[Event]:
    needle = (query or "").strip().lower()
    result = []
    for ev in pool:
        if needle and needle not in ev.title.lower() and needle not in (ev.description or "").lower():
            continue
        if category and ev.category != category:
            continue
        result.append(ev)
    return result


def list_categories(pool: Iterable[Event]) -> list[str]:
    seen: dict[str, None] = {}
    for ev in pool:
        if ev.category:
            seen.setdefault(ev.category, None)
    return list(seen)


__all__ = ["sort_events", "upcoming_events", "filter_events", "list_categories"]
