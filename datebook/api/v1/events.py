# datebook/api/v1/events.py

from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

# --- Наши Модули ---
from datebook.config import settings
from datebook.core.calendar.dates import safe_parse_iso, time_to_minutes
from datebook.core.events.conflicts import conflict_message
from datebook.core.events.queries import filter_events, list_categories, upcoming_events
from datebook.core.events.schemas import Conflict, Event, EventCreate, EventUpdate
from datebook.core.events.service import EventsService
# --- ЗАВИСИМОСТИ ---
from datebook.db.base import get_async_db_session

# --- Инициализация ---
router = APIRouter(prefix="/v1/events", tags=["events"])
log = logging.getLogger(__name__)


# --- Модели Запроса/Ответа ---
class ConflictCheckRequest(BaseModel):
    """Кандидат на проверку пересечений (например, из формы до сохранения)."""
    model_config = ConfigDict(populate_by_name=True)

    date: str
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    exclude_id: Optional[str] = Field(None, alias="excludeId", description="Не сравнивать с этим событием")

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, value: str) -> str:
        if safe_parse_iso(value) is None:
            raise ValueError("date must be a valid YYYY-MM-DD date")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _time_is_hhmm(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and time_to_minutes(value) is None:
            raise ValueError("time must be a valid HH:MM time")
        return value


class ConflictReport(BaseModel):
    conflicts: List[Conflict] = Field(default_factory=list)
    message: str = ""


class MoveRequest(BaseModel):
    date: dt.date = Field(..., description="Новый день события")


class MoveResponse(BaseModel):
    changed: bool
    event: Event
    conflicts: List[Conflict] = Field(default_factory=list)
    message: str = ""


class SeriesDeleted(BaseModel):
    deleted: int


# --- Фабрика сервиса ---
def get_events_service(db: AsyncSession = Depends(get_async_db_session)) -> EventsService:
    return EventsService(
        db,
        max_occurrences=settings.RECURRENCE_MAX_OCCURRENCES,
        clamp_months=settings.clamp_months,
    )


def _not_found(event_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event {event_id} not found")


# --- Эндпоинты ---
@router.get("", response_model=List[Event], summary="List events")
async def list_events(
    q: Optional[str] = Query(None, description="Поиск по названию и описанию"),
    category: Optional[str] = Query(None),
    service: EventsService = Depends(get_events_service),
) -> List[Event]:
    events = await service.get_all()
    return filter_events(events, query=q, category=category)


@router.post("", response_model=List[Event], status_code=status.HTTP_201_CREATED, summary="Create event")
async def create_event(
    payload: EventCreate = Body(...),
    service: EventsService = Depends(get_events_service),
) -> List[Event]:
    """Создаёт событие; для повторяющегося возвращает всю развёрнутую серию."""
    created = await service.create_event(payload)
    log.info("[API /events] Created %d records for '%s'", len(created), payload.title)
    return created


@router.get("/upcoming", response_model=List[Event], summary="Next upcoming events")
async def get_upcoming(
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: EventsService = Depends(get_events_service),
) -> List[Event]:
    events = await service.get_all()
    return upcoming_events(events, limit=limit or settings.UPCOMING_LIMIT)


@router.get("/categories", response_model=List[str], summary="Distinct categories")
async def get_categories(service: EventsService = Depends(get_events_service)) -> List[str]:
    return list_categories(await service.get_all())


@router.post("/conflicts", response_model=ConflictReport, summary="Check a time slot for conflicts")
async def check_conflicts(
    payload: ConflictCheckRequest = Body(...),
    service: EventsService = Depends(get_events_service),
) -> ConflictReport:
    conflicts = await service.find_conflicts(payload, exclude_id=payload.exclude_id)
    return ConflictReport(conflicts=conflicts, message=conflict_message(conflicts))


@router.delete("/series/{series_id}", response_model=SeriesDeleted, summary="Delete a whole series")
async def delete_series(
    series_id: str,
    service: EventsService = Depends(get_events_service),
) -> SeriesDeleted:
    deleted = await service.delete_series(series_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Series {series_id} not found")
    return SeriesDeleted(deleted=deleted)


@router.get("/{event_id}", response_model=Event, summary="Get event")
async def get_event(event_id: str, service: EventsService = Depends(get_events_service)) -> Event:
    event = await service.get(event_id)
    if event is None:
        raise _not_found(event_id)
    return event


@router.patch("/{event_id}", response_model=List[Event], summary="Update event")
async def update_event(
    event_id: str,
    payload: EventUpdate = Body(...),
    service: EventsService = Depends(get_events_service),
) -> List[Event]:
    """
    Частичное обновление. Смена правила повторения пересоздаёт серию,
    поэтому в ответе список всех записанных событий.
    """
    try:
        written = await service.update_event(event_id, payload)
    except ValidationError as exc:
        # Поля по отдельности валидны, но вместе с уже сохранёнными нет
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc
    if written is None:
        raise _not_found(event_id)
    return written


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete event")
async def delete_event(event_id: str, service: EventsService = Depends(get_events_service)) -> Response:
    if not await service.delete_event(event_id):
        raise _not_found(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/move", response_model=MoveResponse, summary="Move event to another day")
async def move_event(
    event_id: str,
    payload: MoveRequest = Body(...),
    service: EventsService = Depends(get_events_service),
) -> MoveResponse:
    result = await service.move_event(event_id, payload.date)
    if result is None:
        raise _not_found(event_id)
    return MoveResponse(
        changed=result.changed,
        event=result.event,
        conflicts=result.conflicts,
        message=conflict_message(result.conflicts),
    )
