# datebook/core/events/service.py

"""Service-layer for calendar events: the record store plus create/update/move use cases."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .conflicts import TimedItem, check_move, find_conflicts
from .models import EventRecord
from .recurrence import DEFAULT_MAX_OCCURRENCES, expand
from .schemas import Conflict, Event, EventCreate, EventUpdate, MoveCheck

log = logging.getLogger(__name__)


class EventNotFoundError(LookupError):
    """Запись с таким id отсутствует в хранилище."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event with id {event_id} not found")
        self.event_id = event_id


def _pattern_key(event: Event) -> dict | None:
    return event.recurrence.model_dump() if event.recurrence else None


class EventsService:
    """
    Асинхронный сервис событий.
    Использует внедрение зависимостей (DI) для получения AsyncSession;
    commit/rollback делает вызывающая сторона (FastAPI-зависимость или
    ``async_session_context``), поэтому замена серии атомарна для наблюдателей.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
        clamp_months: bool = False,
    ) -> None:
        """
        Args:
            db_session (AsyncSession): Активная асинхронная сессия SQLAlchemy.
            max_occurrences (int): Предел развёртки серии без явного count.
            clamp_months (bool): Политика ``monthly`` для несуществующих чисел месяца.
        """
        self.db: AsyncSession = db_session
        self.max_occurrences = max_occurrences
        self.clamp_months = clamp_months

    # ------------------------------------------------------------------ #
    #                            Store contract                          #
    # ------------------------------------------------------------------ #

    async def get_all(self) -> List[Event]:
        stmt = select(EventRecord).order_by(EventRecord.date, EventRecord.created_at)
        records = (await self.db.scalars(stmt)).all()
        log.debug("Loaded %d events", len(records))
        return [r.to_schema() for r in records]

    async def get(self, event_id: str) -> Event | None:
        record = await self.db.get(EventRecord, event_id)
        return record.to_schema() if record else None

    async def get_by_date(self, day: str) -> List[Event]:
        stmt = select(EventRecord).where(EventRecord.date == day).order_by(EventRecord.created_at)
        return [r.to_schema() for r in (await self.db.scalars(stmt)).all()]

    async def list_between(self, first_day: str, last_day: str) -> List[Event]:
        """События с ``first_day <= date <= last_day`` (ISO-строки сравниваются лексикографически)."""
        stmt = (
            select(EventRecord)
            .where(EventRecord.date >= first_day, EventRecord.date <= last_day)
            .order_by(EventRecord.date, EventRecord.created_at)
        )
        return [r.to_schema() for r in (await self.db.scalars(stmt)).all()]

    async def save_one(self, event: Event) -> Event:
        """Вставка или полная перезапись записи с тем же id."""
        record = await self.db.get(EventRecord, event.id)
        if record is None:
            self.db.add(EventRecord.from_schema(event))
        else:
            record.apply(event)
        await self.db.flush()
        return event

    async def save_many(self, events: Iterable[Event]) -> List[Event]:
        saved = [await self.save_one(ev) for ev in events]
        log.info("Saved %d events", len(saved))
        return saved

    async def update_one(self, event: Event) -> Event:
        """
        Перезаписывает существующую запись.

        Raises:
            EventNotFoundError: записи с ``event.id`` нет.
        """
        record = await self.db.get(EventRecord, event.id)
        if record is None:
            log.warning("Event id=%s not found for update.", event.id)
            raise EventNotFoundError(event.id)
        record.apply(event)
        await self.db.flush()
        log.info("Updated event id=%s", event.id)
        return event

    async def delete_one(self, event_id: str) -> bool:
        record = await self.db.get(EventRecord, event_id)
        if record is None:
            log.warning("Event id=%s not found for deletion.", event_id)
            return False
        await self.db.delete(record)
        await self.db.flush()
        log.info("Deleted event id=%s", event_id)
        return True

    async def delete_series(self, series_id: str) -> int:
        result = await self.db.execute(delete(EventRecord).where(EventRecord.series_id == series_id))
        await self.db.flush()
        log.info("Deleted %d events of series %s", result.rowcount, series_id)
        return result.rowcount

    async def clear_all(self) -> int:
        result = await self.db.execute(delete(EventRecord))
        await self.db.flush()
        log.info("Cleared %d events", result.rowcount)
        return result.rowcount

    # ------------------------------------------------------------------ #
    #                            Use cases                               #
    # ------------------------------------------------------------------ #

    def _expand(self, template: Event, now: datetime) -> List[Event]:
        return expand(
            template,
            now=now,
            default_cap=self.max_occurrences,
            clamp_months=self.clamp_months,
        )

    async def create_event(self, data: EventCreate, now: Optional[datetime] = None) -> List[Event]:
        """
        Создаёт событие; повторяющееся разворачивается в серию и сохраняется пачкой.

        Returns:
            List[Event]: Все сохранённые записи; первая - само созданное событие.
        """
        stamp = now or datetime.now()
        template = Event(
            id=str(uuid.uuid4()),
            created_at=stamp,
            updated_at=stamp,
            **data.model_dump(),
        )
        log.info("Creating event '%s' on %s", template.title, template.date)
        if template.is_recurring:
            return await self.save_many(self._expand(template, stamp))
        await self.save_one(template)
        return [template]

    async def update_event(
        self, event_id: str, patch: EventUpdate, now: Optional[datetime] = None
    ) -> List[Event] | None:
        """
        Применяет частичное обновление.

        Если меняется правило повторения, серия заменяется целиком:
        старые вхождения удаляются, изменённое событие становится новым
        шаблоном и разворачивается заново. Всё это в одной транзакции сессии.

        Returns:
            List[Event] | None: Записанные события или None, если id не найден.
        """
        existing = await self.get(event_id)
        if existing is None:
            log.warning("Event id=%s not found for update.", event_id)
            return None

        stamp = now or datetime.now()
        changes = patch.changes()
        # Повторная проверка на границе: время могло прийти только одной половиной
        updated = Event.model_validate(
            {**existing.model_dump(), **changes, "updated_at": stamp}
        )
        EventCreate.model_validate(updated.model_dump(exclude={"id", "series_id", "created_at", "updated_at"}))

        if "recurrence" not in changes or _pattern_key(updated) == _pattern_key(existing):
            return [await self.update_one(updated)]

        series_id = existing.series_id or existing.id
        log.info("Recurrence of event %s changed, regenerating series %s", event_id, series_id)
        if existing.series_id:
            await self.delete_series(series_id)
        else:
            await self.delete_one(event_id)
        template = updated.model_copy(update={"series_id": series_id})
        return await self.save_many(self._expand(template, stamp))

    async def delete_event(self, event_id: str) -> bool:
        return await self.delete_one(event_id)

    async def find_conflicts(
        self, candidate: TimedItem, exclude_id: Optional[str] = None
    ) -> List[Conflict]:
        pool = await self.get_by_date(candidate.date)
        return find_conflicts(candidate, pool, exclude_id=exclude_id)

    async def move_event(
        self, event_id: str, new_date: date, now: Optional[datetime] = None
    ) -> MoveCheck | None:
        """
        Переносит событие на другой день (drag-to-reschedule).

        Конфликты не блокируют перенос, а возвращаются вместе с результатом.
        """
        event = await self.get(event_id)
        if event is None:
            log.warning("Event id=%s not found for move.", event_id)
            return None
        pool = await self.get_by_date(new_date.isoformat())
        result = check_move(event, new_date, pool, now=now)
        if result.changed:
            await self.update_one(result.event)
        return result


__all__ = ["EventNotFoundError", "EventsService"]
