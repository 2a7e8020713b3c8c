# datebook/config.py

from __future__ import annotations

import logging
from typing import Literal

# --- Импорты Pydantic ---
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)

# Драйверы, с которыми умеет работать async engine (см. db/base.py)
SUPPORTED_DB_DRIVERS: tuple[str, ...] = ("postgresql+asyncpg://", "sqlite+aiosqlite://")


class Settings(BaseSettings):
    """
    Единый конфиг проекта. Читает переменные окружения.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False, # Имена переменных окружения не чувствительны к регистру
        extra="ignore", # Игнорировать лишние переменные окружения
    )

    # --- Основные настройки ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")
    LOG_LEVEL: str = Field("INFO", description="Root log level for logging.basicConfig")

    # --- База данных ---
    # DATABASE_URL обязателен, поэтому нет дефолта
    DATABASE_URL: str = Field(..., description="Async database URL (postgresql+asyncpg://... or sqlite+aiosqlite://...)")

    # --- Календарь ---
    WEEK_START: int = Field(0, ge=0, le=6, description="First day of the week, 0=Sunday .. 6=Saturday")
    RECURRENCE_MAX_OCCURRENCES: int = Field(
        100, ge=1, description="Occurrence cap for a recurring event without an explicit count"
    )
    MONTH_OVERFLOW_POLICY: Literal["overflow", "clamp"] = Field(
        "overflow", description="How monthly steps treat a day-of-month missing from the target month"
    )
    GRID_SIX_WEEKS: bool = Field(False, description="Always pad the month grid to 42 cells")
    UPCOMING_LIMIT: int = Field(5, ge=1, description="Size of the upcoming events list")

    @model_validator(mode='after')
    def check_database_driver(self) -> 'Settings':
        if not self.DATABASE_URL.startswith(SUPPORTED_DB_DRIVERS):
            log.warning("DATABASE_URL uses an unsupported driver: %s", self.DATABASE_URL.split("://", 1)[0])
            raise ValueError("DATABASE_URL must use the 'asyncpg' or 'aiosqlite' driver for async operations.")
        return self

    @property
    def clamp_months(self) -> bool:
        return self.MONTH_OVERFLOW_POLICY == "clamp"


# --- Создание единственного экземпляра настроек ---
try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug("Loaded settings: DB URL=%s..., week start=%d, month policy=%s",
             settings.DATABASE_URL[:25],
             settings.WEEK_START,
             settings.MONTH_OVERFLOW_POLICY)
except Exception:
    log.exception("Failed to instantiate Settings.")
    # Если не удалось создать настройки, приложение не сможет работать
    raise
