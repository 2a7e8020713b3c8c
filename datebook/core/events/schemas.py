# datebook/core/events/schemas.py
"""
Pydantic-схемы событий календаря.

Используются в:
    * core.events.recurrence / conflicts / queries - ядро планировщика
    * core.calendar.grid                           - сетка месяца/недели/дня
    * core.events.service                          - маппинг ORM → Event
    * api/v1/events.py, api/v1/calendar.py         - публичный REST

Имена атрибутов в Python - snake_case, на проводе - camelCase
(``startTime``, ``daysOfWeek``, ``createdAt`` …). На вход принимаются оба.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from datebook.core.calendar.dates import safe_parse_iso, time_to_minutes

log = logging.getLogger(__name__)

RECURRENCE_TYPES: tuple[str, ...] = ("none", "daily", "weekly", "monthly", "custom")
ConflictKind = Literal["overlap", "same-time"]
# Верхняя граница count на входе (REST/формы); записи в хранилище не ограничиваются
MAX_RECURRENCE_COUNT = 1000


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --------------------------------------------------------------------------- #
#                     recurrence: tagged union по полю type                   #
# --------------------------------------------------------------------------- #
class _PatternBase(_CamelModel):
    interval: int = Field(1, ge=1, description="Шаг: каждые N дней/недель/месяцев")
    end_date: Optional[str] = Field(None, alias="endDate", description="Включительная граница YYYY-MM-DD")
    count: Optional[int] = Field(None, ge=1, description="Максимум повторений, включая исходное")


class NoRecurrence(_PatternBase):
    type: Literal["none"] = "none"


class DailyRecurrence(_PatternBase):
    type: Literal["daily"] = "daily"


class WeeklyRecurrence(_PatternBase):
    type: Literal["weekly"] = "weekly"


class MonthlyRecurrence(_PatternBase):
    type: Literal["monthly"] = "monthly"


class CustomRecurrence(_PatternBase):
    type: Literal["custom"] = "custom"
    days_of_week: list[int] = Field(
        default_factory=list, alias="daysOfWeek", description="0=Sunday .. 6=Saturday"
    )


RecurrencePattern = Annotated[
    Union[NoRecurrence, DailyRecurrence, WeeklyRecurrence, MonthlyRecurrence, CustomRecurrence],
    Field(discriminator="type"),
]


def _coerce_recurrence(value: Any) -> Any:
    # Неизвестный тип повторения ведёт себя как "none", а не роняет валидацию
    if isinstance(value, dict) and value.get("type") not in RECURRENCE_TYPES:
        log.warning("Unknown recurrence type %r, treating as 'none'", value.get("type"))
        return {**value, "type": "none"}
    return value


# --------------------------------------------------------------------------- #
#                                  events                                     #
# --------------------------------------------------------------------------- #
class EventFields(_CamelModel):
    """Общие пользовательские поля события."""

    title: str = Field(..., min_length=1, description="Заголовок события")
    description: Optional[str] = None
    date: str = Field(..., description="Календарный день YYYY-MM-DD, без часового пояса")
    start_time: Optional[str] = Field(None, alias="startTime", description="HH:MM")
    end_time: Optional[str] = Field(None, alias="endTime", description="HH:MM")
    category: Optional[str] = None
    color: Optional[str] = None
    recurrence: Optional[RecurrencePattern] = None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _coerce_unknown_recurrence(cls, value: Any) -> Any:
        return _coerce_recurrence(value)


class Event(EventFields):
    """Событие в том виде, в каком оно лежит в хранилище."""

    id: str = Field(..., description="Непрозрачный уникальный идентификатор")
    series_id: Optional[str] = Field(
        None, alias="seriesId", description="ID шаблона, из которого развёрнута серия"
    )
    created_at: dt.datetime = Field(..., alias="createdAt")
    updated_at: dt.datetime = Field(..., alias="updatedAt")

    @property
    def is_all_day(self) -> bool:
        return self.start_time is None and self.end_time is None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None and self.recurrence.type != "none"


# --- Проверки на входной границе (формы / REST) ---
def _check_date(value: Optional[str], field: str) -> None:
    if value is not None and safe_parse_iso(value) is None:
        raise ValueError(f"{field} must be a valid YYYY-MM-DD date")


def _check_time(value: Optional[str], field: str) -> None:
    if value is not None and time_to_minutes(value) is None:
        raise ValueError(f"{field} must be a valid HH:MM time")


def _check_time_range(start: Optional[str], end: Optional[str]) -> None:
    if start is not None and end is not None and time_to_minutes(end) <= time_to_minutes(start):
        raise ValueError("endTime must be after startTime")


def _check_pattern(pattern: Any) -> None:
    if pattern is None:
        return
    _check_date(pattern.end_date, "recurrence.endDate")
    if pattern.count is not None and pattern.count > MAX_RECURRENCE_COUNT:
        raise ValueError(f"recurrence.count must be at most {MAX_RECURRENCE_COUNT}")
    if isinstance(pattern, CustomRecurrence):
        bad = [d for d in pattern.days_of_week if not 0 <= d <= 6]
        if bad:
            raise ValueError(f"recurrence.daysOfWeek values must be 0..6, got {bad}")


class EventCreate(EventFields):
    """Событие, приходящее от пользователя (ещё без ID и меток времени)."""

    @model_validator(mode="after")
    def _validate_boundary(self) -> "EventCreate":
        _check_date(self.date, "date")
        _check_time(self.start_time, "startTime")
        _check_time(self.end_time, "endTime")
        _check_time_range(self.start_time, self.end_time)
        _check_pattern(self.recurrence)
        return self


class EventUpdate(_CamelModel):
    """Частичное обновление: учитываются только переданные поля."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    category: Optional[str] = None
    color: Optional[str] = None
    recurrence: Optional[RecurrencePattern] = None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _coerce_unknown_recurrence(cls, value: Any) -> Any:
        return _coerce_recurrence(value)

    @model_validator(mode="after")
    def _validate_boundary(self) -> "EventUpdate":
        if "title" in self.model_fields_set and self.title is None:
            raise ValueError("title cannot be null")
        if "date" in self.model_fields_set and self.date is None:
            raise ValueError("date cannot be null")
        _check_date(self.date, "date")
        _check_time(self.start_time, "startTime")
        _check_time(self.end_time, "endTime")
        _check_time_range(self.start_time, self.end_time)
        _check_pattern(self.recurrence)
        return self

    def changes(self) -> dict[str, Any]:
        """Только переданные поля, snake_case, вложенные модели как dict."""
        return self.model_dump(exclude_unset=True)


# --------------------------------------------------------------------------- #
#                          результаты ядра                                    #
# --------------------------------------------------------------------------- #
class Conflict(_CamelModel):
    event: Event
    kind: ConflictKind


class MoveCheck(_CamelModel):
    """Итог проверки переноса события на другой день (drag-to-reschedule)."""

    changed: bool
    event: Event
    conflicts: list[Conflict] = Field(default_factory=list)


class CalendarDay(_CamelModel):
    """Ячейка сетки: день и события, чья ``date`` совпадает с ним."""

    date: dt.date
    is_current_month: bool = Field(..., alias="isCurrentMonth")
    is_today: bool = Field(..., alias="isToday")
    events: list[Event] = Field(default_factory=list)


__all__: list[str] = [
    "RECURRENCE_TYPES",
    "MAX_RECURRENCE_COUNT",
    "ConflictKind",
    "NoRecurrence",
    "DailyRecurrence",
    "WeeklyRecurrence",
    "MonthlyRecurrence",
    "CustomRecurrence",
    "RecurrencePattern",
    "EventFields",
    "Event",
    "EventCreate",
    "EventUpdate",
    "Conflict",
    "MoveCheck",
    "CalendarDay",
]
