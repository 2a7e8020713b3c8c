from __future__ import annotations
import logging

from fastapi import FastAPI

from datebook.api.v1.calendar import router as calendar_router
from datebook.api.v1.events import router as events_router
from datebook.api.v1.health import router as health_router
from datebook.config import settings
from datebook.db.base import create_db_and_tables

# Configure basic logging
logging.basicConfig(level=settings.LOG_LEVEL.upper())
log = logging.getLogger(__name__)
description = "Personal calendar: events, recurring series, conflicts and month/week/day grids."
tags_metadata = [
    {"name": "events", "description": "Create, update, move and delete events; conflict checks."},
    {"name": "calendar", "description": "Month, week and day grids with events bucketed by day."},
    {"name": "Health", "description": "Liveness and database checks."},
]

app = FastAPI(
    title="Datebook API",
    description=description,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

app.include_router(events_router)
app.include_router(calendar_router)
app.include_router(health_router)

log.info("\U0001F331 FastAPI application configured. Environment: %s", settings.ENVIRONMENT)

@app.on_event("startup")
async def startup_event() -> None:
    # Для SQLite миграций нет: схему создаём сразу (Postgres - через Alembic)
    if settings.DATABASE_URL.startswith("sqlite+aiosqlite://") and settings.ENVIRONMENT != "test":
        await create_db_and_tables()
        log.info("SQLite schema ensured.")
    log.info("\U0001F680 FastAPI application startup complete.")

@app.on_event("shutdown")
async def shutdown_event() -> None:
    log.info("\U0001F44B FastAPI application shutdown.")
