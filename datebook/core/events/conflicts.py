# datebook/core/events/conflicts.py
"""Service for detecting time-overlap conflicts between events on the same day."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Protocol

from datebook.core.calendar.dates import safe_parse_iso, time_to_minutes, to_iso
from .schemas import Conflict, Event, MoveCheck

log = logging.getLogger(__name__)


class TimedItem(Protocol):
    """Всё, у чего есть день и (необязательно) время: Event, EventCreate и т.п."""

    date: str
    start_time: Optional[str]
    end_time: Optional[str]


def find_conflicts(
    candidate: TimedItem,
    pool: Iterable[Event],
    exclude_id: Optional[str] = None,
) -> list[Conflict]:
    """
    Return events from ``pool`` whose time range overlaps the candidate's on the same date.

    Overlap rule is half-open: ``start < other_end and end > other_start``, so
    back-to-back events (10:00-11:00 and 11:00-12:00) do not conflict.
    Events without both times (all-day) never take part in time conflicts,
    and neither does anything whose date does not parse.
    """
    # Пул сравнивается строкой с валидной датой кандидата, поэтому битые даты пула отсеются сами
    if safe_parse_iso(candidate.date) is None:
        log.warning("Conflict check skipped: malformed date %r", candidate.date)
        return []

    same_date = [
        ev for ev in pool
        if ev.date == candidate.date and not (exclude_id and ev.id == exclude_id)
    ]

    start = time_to_minutes(candidate.start_time)
    end = time_to_minutes(candidate.end_time)
    if start is None or end is None:
        return []

    conflicts: list[Conflict] = []
    for ev in same_date:
        other_start = time_to_minutes(ev.start_time)
        other_end = time_to_minutes(ev.end_time)
        if other_start is None or other_end is None:
            continue
        if start < other_end and end > other_start:
            kind = "same-time" if (start == other_start and end == other_end) else "overlap"
            conflicts.append(Conflict(event=ev, kind=kind))

    log.debug("Found %d conflicts on %s", len(conflicts), candidate.date)
    return conflicts


def has_conflicts(
    candidate: TimedItem,
    pool: Iterable[Event],
    exclude_id: Optional[str] = None,
) -> bool:
    return bool(find_conflicts(candidate, pool, exclude_id))


def conflict_message(conflicts: list[Conflict]) -> str:
    if not conflicts:
        return ""
    if len(conflicts) == 1:
        conflict = conflicts[0]
        relation = "has the exact same time as" if conflict.kind == "same-time" else "overlaps with"
        at = f" at {conflict.event.start_time}" if conflict.event.start_time else ""
        return f'This event {relation} "{conflict.event.title}"{at}.'
    return f"This event conflicts with {len(conflicts)} other events on the same day."


def check_move(
    event: Event,
    new_date: date,
    pool: Iterable[Event],
    now: Optional[datetime] = None,
) -> MoveCheck:
    """
    Проверка переноса события на другой день (drag-to-reschedule).

    Сам перенос не сохраняется: возвращаем копию с новой датой и список
    конфликтов на целевом дне. Если день не изменился, проверять нечего.
    """
    target = to_iso(new_date)
    if target == event.date:
        return MoveCheck(changed=False, event=event, conflicts=[])

    moved = event.model_copy(update={"date": target, "updated_at": now or datetime.now()})
    conflicts = find_conflicts(moved, pool, exclude_id=event.id)
    if conflicts:
        log.info("Moving event %s to %s causes %d conflicts", event.id, target, len(conflicts))
    return MoveCheck(changed=True, event=moved, conflicts=conflicts)


__all__ = [
    "TimedItem",
    "find_conflicts",
    "has_conflicts",
    "conflict_message",
    "check_move",
]
