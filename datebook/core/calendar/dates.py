# datebook/core/calendar/dates.py
"""
Арифметика календарных дат.

Все функции работают с ``datetime.date``, то есть с «днём» без времени и без
часового пояса. ``datetime`` сюда не передаём: сравнение «сегодня»
с датой события должно идти по календарному дню, а не по моменту времени.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

SUNDAY = 0
SATURDAY = 6


class InvalidDateError(ValueError):
    """Строка не является датой вида YYYY-MM-DD."""


# --------------------------------------------------------------------------- #
#                               arithmetic                                    #
# --------------------------------------------------------------------------- #
def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_weeks(d: date, n: int) -> date:
    return d + timedelta(weeks=n)


def add_months(d: date, n: int, clamp: bool = False) -> date:
    """
    Сдвигает дату на ``n`` календарных месяцев.

    Если в целевом месяце нет такого числа (31-е в 30-дневном месяце):
      * по умолчанию лишние дни «перетекают» в следующий месяц
        (31 января + 1 месяц = 3 марта в невисокосный год);
      * при ``clamp=True`` берём последний день целевого месяца.
    """
    # relativedelta прижимает к концу месяца; для overflow добавляем недостающие дни
    clamped = d + relativedelta(months=n)
    if clamp:
        return clamped
    return clamped + timedelta(days=d.day - clamped.day)


def compare(a: date, b: date) -> int:
    return (a > b) - (a < b)


def day_of_week(d: date) -> int:
    """0=Sunday .. 6=Saturday (``date.weekday()`` считает с понедельника)."""
    return (d.weekday() + 1) % 7


# --------------------------------------------------------------------------- #
#                               ISO strings                                   #
# --------------------------------------------------------------------------- #
def to_iso(d: date) -> str:
    return d.isoformat()


def parse_iso(value: str) -> date:
    """
    Разбирает строго ``YYYY-MM-DD``.

    Raises:
        InvalidDateError: строка не в формате или такой даты нет (2023-02-30).
    """
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise InvalidDateError(f"Not an ISO calendar date: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDateError(f"Not an ISO calendar date: {value!r}") from exc


def safe_parse_iso(value: Optional[str]) -> Optional[date]:
    """Как :func:`parse_iso`, но вместо исключения возвращает ``None``."""
    if value is None:
        return None
    try:
        return parse_iso(value)
    except InvalidDateError:
        return None


def time_to_minutes(value: Optional[str]) -> Optional[int]:
    """``"09:30"`` -> 570. Пустое или битое значение -> ``None``."""
    if not value:
        return None
    m = _TIME_RE.match(value)
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


# --------------------------------------------------------------------------- #
#                          week / month boundaries                            #
# --------------------------------------------------------------------------- #
def start_of_week(d: date, week_start: int = SUNDAY) -> date:
    offset = (day_of_week(d) - week_start) % 7
    return d - timedelta(days=offset)


def end_of_week(d: date, week_start: int = SUNDAY) -> date:
    return start_of_week(d, week_start) + timedelta(days=6)


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def iter_days(start: date, end: date) -> Iterator[date]:
    """Все дни от ``start`` до ``end`` включительно, по возрастанию."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


# --------------------------------------------------------------------------- #
#                                predicates                                   #
# --------------------------------------------------------------------------- #
def is_same_day(a: date, b: date) -> bool:
    return a == b


def is_today(d: date, today: Optional[date] = None) -> bool:
    # «Сегодня» берём в момент вызова, не кэшируем
    return d == (today or date.today())


__all__ = [
    "InvalidDateError",
    "SUNDAY",
    "SATURDAY",
    "add_days",
    "add_weeks",
    "add_months",
    "compare",
    "day_of_week",
    "to_iso",
    "parse_iso",
    "safe_parse_iso",
    "time_to_minutes",
    "start_of_week",
    "end_of_week",
    "start_of_month",
    "end_of_month",
    "iter_days",
    "is_same_day",
    "is_today",
]
