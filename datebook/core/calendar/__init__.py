"""
Calendar subsystem package.

• ``dates`` - арифметика календарных дней (``datetime.date``, без часовых поясов).
• ``grid``  - сетка месяца/недели/дня с событиями по ячейкам.

Здесь реэкспортируется только ``dates``: ``grid`` зависит от
``datebook.core.events``, а тот, в свою очередь, от ``dates``.
"""
from __future__ import annotations

from .dates import (  # noqa: F401 (экспорт в __all__)
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
    parse_iso,
    safe_parse_iso,
    start_of_month,
    start_of_week,
    to_iso,
)

__all__: list[str] = [
    "InvalidDateError",
    "add_days",
    "add_weeks",
    "add_months",
    "compare",
    "day_of_week",
    "to_iso",
    "parse_iso",
    "safe_parse_iso",
    "start_of_week",
    "end_of_week",
    "start_of_month",
    "end_of_month",
    "is_same_day",
    "is_today",
]
