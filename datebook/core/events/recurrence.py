# datebook/core/events/recurrence.py
"""
Развёртка повторяющегося события в конкретные вхождения.

Шаблон (событие с ``recurrence``) превращается в упорядоченный список
обычных ``Event``: сам шаблон + сгенерированные копии с новыми ``id``,
своими датами и свежими ``createdAt``/``updatedAt``. Все вхождения
помечаются общим ``seriesId``, чтобы вызывающий код мог целиком
заменить серию при изменении правила повторения.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Optional

from datebook.core.calendar.dates import (
    add_days,
    add_months,
    add_weeks,
    day_of_week,
    safe_parse_iso,
    to_iso,
)
from .schemas import (
    CustomRecurrence,
    DailyRecurrence,
    Event,
    MonthlyRecurrence,
    NoRecurrence,
    WeeklyRecurrence,
)

log = logging.getLogger(__name__)

# Верхняя граница, если в правиле не задан count
DEFAULT_MAX_OCCURRENCES = 100

DAY_NAMES: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _new_id() -> str:
    return str(uuid.uuid4())


def _valid_weekdays(days: list[int]) -> set[int]:
    valid = {d for d in days if 0 <= d <= 6}
    if len(valid) != len(set(days)):
        log.warning("Ignoring out-of-range weekday numbers in %s", days)
    return valid


def _next_weekday(current: date, weekdays: set[int]) -> date:
    # Шагаем по одному дню; interval здесь не участвует
    candidate = add_days(current, 1)
    while day_of_week(candidate) not in weekdays:
        candidate = add_days(candidate, 1)
    return candidate


def next_occurrence(current: date, pattern, clamp_months: bool = False) -> Optional[date]:
    """
    Следующая дата-кандидат после ``current`` по правилу ``pattern``.

    Возвращает ``None`` для ``none`` и для нераспознанного правила:
    развёртка на этом останавливается.
    """
    if isinstance(pattern, DailyRecurrence):
        return add_days(current, pattern.interval)
    if isinstance(pattern, WeeklyRecurrence):
        return add_weeks(current, pattern.interval)
    if isinstance(pattern, MonthlyRecurrence):
        return add_months(current, pattern.interval, clamp=clamp_months)
    if isinstance(pattern, CustomRecurrence):
        weekdays = _valid_weekdays(pattern.days_of_week)
        if weekdays:
            return _next_weekday(current, weekdays)
        return add_days(current, pattern.interval)
    if not isinstance(pattern, NoRecurrence):
        log.warning("Unhandled recurrence pattern %r, stopping expansion", pattern)
    return None


def expand(
    template: Event,
    *,
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = _new_id,
    default_cap: int = DEFAULT_MAX_OCCURRENCES,
    clamp_months: bool = False,
) -> list[Event]:
    """
    Разворачивает шаблон в список вхождений.

    Args:
        template (Event): Исходное событие с правилом повторения.
        now (Optional[datetime]): Момент генерации для ``createdAt``/``updatedAt``.
            Defaults to ``datetime.now()``.
        id_factory (Callable[[], str]): Источник новых ID.
        default_cap (int): Предел числа вхождений, если ``count`` не задан.
        clamp_months (bool): Для ``monthly`` прижимать к последнему дню месяца
            вместо перетекания в следующий.

    Returns:
        list[Event]: Шаблон первым, затем вхождения по возрастанию даты.
            Без повторения (или ``type == "none"``) -> ровно ``[template]``.
    """
    pattern = template.recurrence
    if pattern is None or isinstance(pattern, NoRecurrence):
        return [template]

    start = safe_parse_iso(template.date)
    if start is None:
        log.warning("Template %s has malformed date %r, not expanding", template.id, template.date)
        return [template]

    end_date: Optional[date] = None
    if pattern.end_date is not None:
        end_date = safe_parse_iso(pattern.end_date)
        if end_date is None:
            log.warning("Ignoring malformed endDate %r on template %s", pattern.end_date, template.id)

    limit = pattern.count or default_cap
    stamp = now or datetime.now()
    first = template.model_copy(update={"series_id": template.series_id or template.id}, deep=True)
    occurrences: list[Event] = [first]

    current = start
    while len(occurrences) < limit:
        candidate = next_occurrence(current, pattern, clamp_months=clamp_months)
        if candidate is None:
            break
        if end_date is not None and candidate > end_date:
            break
        occurrences.append(
            first.model_copy(
                update={
                    "id": id_factory(),
                    "date": to_iso(candidate),
                    "created_at": stamp,
                    "updated_at": stamp,
                },
                deep=True,
            )
        )
        current = candidate

    log.debug(
        "Expanded template %s (%s) into %d occurrences", template.id, pattern.type, len(occurrences)
    )
    return occurrences


def is_recurring(event: Event) -> bool:
    return event.is_recurring


def describe(pattern) -> str:
    """Короткое описание правила для карточки события."""
    if isinstance(pattern, DailyRecurrence):
        return "Daily" if pattern.interval == 1 else f"Every {pattern.interval} days"
    if isinstance(pattern, WeeklyRecurrence):
        return "Weekly" if pattern.interval == 1 else f"Every {pattern.interval} weeks"
    if isinstance(pattern, MonthlyRecurrence):
        return "Monthly" if pattern.interval == 1 else f"Every {pattern.interval} months"
    if isinstance(pattern, CustomRecurrence):
        weekdays = sorted(_valid_weekdays(pattern.days_of_week))
        if weekdays:
            return "Every " + ", ".join(DAY_NAMES[d] for d in weekdays)
        return "Custom recurrence"
    return "No recurrence"


__all__ = [
    "DEFAULT_MAX_OCCURRENCES",
    "next_occurrence",
    "expand",
    "is_recurring",
    "describe",
]
