from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from datebook.config import settings
from datebook.core.calendar.dates import end_of_week, start_of_week, to_iso
from datebook.core.calendar.grid import build_day, build_month_grid, build_week, month_grid_range
from datebook.core.events.schemas import CalendarDay
from datebook.core.events.service import EventsService
from datebook.api.v1.events import get_events_service

router = APIRouter(prefix="/v1/calendar", tags=["calendar"])


def _reference(value: Optional[dt.date]) -> dt.date:
    return value or dt.date.today()


def _week_start(value: Optional[int]) -> int:
    return settings.WEEK_START if value is None else value


@router.get("/month", response_model=List[CalendarDay])
async def get_month(
    date: Optional[dt.date] = Query(None, description="Любой день месяца, YYYY-MM-DD (по умолчанию сегодня)"),
    week_start: Optional[int] = Query(None, ge=0, le=6, alias="weekStart"),
    six_weeks: Optional[bool] = Query(None, alias="sixWeeks"),
    service: EventsService = Depends(get_events_service),
):
    reference = _reference(date)
    first_day = _week_start(week_start)
    pad = settings.GRID_SIX_WEEKS if six_weeks is None else six_weeks
    grid_start, grid_end = month_grid_range(reference, first_day, pad)
    pool = await service.list_between(to_iso(grid_start), to_iso(grid_end))
    return build_month_grid(reference, pool, week_start=first_day, six_weeks=pad)


@router.get("/week", response_model=List[CalendarDay])
async def get_week(
    date: Optional[dt.date] = Query(None),
    week_start: Optional[int] = Query(None, ge=0, le=6, alias="weekStart"),
    service: EventsService = Depends(get_events_service),
):
    reference = _reference(date)
    first_day = _week_start(week_start)
    pool = await service.list_between(
        to_iso(start_of_week(reference, first_day)), to_iso(end_of_week(reference, first_day))
    )
    return build_week(reference, pool, week_start=first_day)


@router.get("/day", response_model=CalendarDay)
async def get_day(
    date: Optional[dt.date] = Query(None),
    service: EventsService = Depends(get_events_service),
):
    reference = _reference(date)
    return build_day(reference, await service.get_by_date(to_iso(reference)))
