"""
Events subsystem package.

• ``Event`` / ``RecurrencePattern`` - Pydantic-модели события и правила (см. schemas.py).
• ``expand()`` - развёртка повторяющегося шаблона в вхождения (recurrence.py).
• ``find_conflicts()`` - пересечения по времени в пределах одного дня (conflicts.py).
• ``EventsService`` - хранилище событий поверх SQLAlchemy (service.py), импортируется
  напрямую из ``datebook.core.events.service``, чтобы чистое ядро не тянуло за собой БД.
"""
from __future__ import annotations

from .conflicts import check_move, conflict_message, find_conflicts, has_conflicts
from .queries import filter_events, list_categories, sort_events, upcoming_events
from .recurrence import describe, expand, is_recurring
from .schemas import (  # noqa: F401 (экспорт в __all__)
    CalendarDay,
    Conflict,
    Event,
    EventCreate,
    EventUpdate,
    MoveCheck,
    RecurrencePattern,
)

__all__: list[str] = [
    "CalendarDay",
    "Conflict",
    "Event",
    "EventCreate",
    "EventUpdate",
    "MoveCheck",
    "RecurrencePattern",
    "expand",
    "describe",
    "is_recurring",
    "find_conflicts",
    "has_conflicts",
    "conflict_message",
    "check_move",
    "sort_events",
    "upcoming_events",
    "filter_events",
    "list_categories",
]
