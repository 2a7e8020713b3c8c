# datebook/core/events/models.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from datebook.db.base import Base
from .schemas import Event


class EventRecord(Base):
    """
    ORM модель события календаря.

    Вхождения повторяющейся серии - обычные строки; общий ``series_id``
    нужен только для замены всей серии целиком.
    """
    __tablename__ = 'events'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Календарный день строкой YYYY-MM-DD, как на проводе
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    # Правило повторения в wire-формате (camelCase), см. schemas.RecurrencePattern
    recurrence: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    series_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_events_series_date', 'series_id', 'date'),
        {"extend_existing": True},
    )

    @classmethod
    def from_schema(cls, event: Event) -> "EventRecord":
        record = cls(id=event.id)
        record.apply(event)
        return record

    def apply(self, event: Event) -> None:
        """Переписывает все поля записи значениями из ``event`` (кроме id)."""
        self.title = event.title
        self.description = event.description
        self.date = event.date
        self.start_time = event.start_time
        self.end_time = event.end_time
        self.category = event.category
        self.color = event.color
        self.recurrence = (
            event.recurrence.model_dump(by_alias=True, exclude_none=True) if event.recurrence else None
        )
        self.series_id = event.series_id
        self.created_at = event.created_at
        self.updated_at = event.updated_at

    def to_schema(self) -> Event:
        return Event(
            id=self.id,
            title=self.title,
            description=self.description,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            category=self.category,
            color=self.color,
            recurrence=self.recurrence,
            series_id=self.series_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str: # pragma: no cover
        return f"<EventRecord id={self.id!r} date={self.date!r} title={self.title!r}>"
