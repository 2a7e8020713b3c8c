# datebook/db/base.py

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator

# Импорты SQLAlchemy
from sqlalchemy.ext.asyncio import (
    async_sessionmaker,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.exc import SQLAlchemyError # Для более специфичного except
from sqlalchemy.pool import StaticPool

# Импорт настроек
from datebook.config import settings

log = logging.getLogger(__name__)

# --- Declarative Base ---
class Base(DeclarativeBase):
    pass

# --- Engine & Session factory ---
if settings.ENVIRONMENT == "test":
    # Одно соединение на весь процесс, иначе каждая сессия получит свою пустую :memory: БД
    log.info("Using in-memory SQLite database (aiosqlite) for tests.")
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
else:
    log.info("Using async database: %s", settings.DATABASE_URL.split("@")[-1])
    engine_kwargs: dict = {"echo": settings.ENVIRONMENT == "dev"}
    if settings.DATABASE_URL.startswith("postgresql+asyncpg://"):
        engine_kwargs["pool_pre_ping"] = True
    engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

async_session_factory = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


# --- Зависимость FastAPI с commit/rollback ---
async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: Creates and yields an async session, handling commit/rollback.
    """
    session: AsyncSession = async_session_factory()
    session_id_for_log = id(session)
    log.debug(">>> get_async_db_session: Session %s created, yielding...", session_id_for_log)
    try:
        yield session
        log.debug(">>> get_async_db_session: Session %s work done, committing...", session_id_for_log)
        await session.commit()
        log.debug(">>> get_async_db_session: Session %s committed.", session_id_for_log)
    except SQLAlchemyError:
        log.exception(
            ">>> get_async_db_session: SQLAlchemyError in session %s, rolling back...",
            session_id_for_log
        )
        await session.rollback()
        raise
    except Exception:
        # HTTPException и прочее: откатываем частичную работу и пробрасываем дальше
        log.debug(">>> get_async_db_session: Exception in session %s scope, rolling back...", session_id_for_log)
        await session.rollback()
        raise
    finally:
        log.debug(">>> get_async_db_session: Closing session %s", session_id_for_log)
        await session.close()


# --- Контекстный менеджер для кода вне FastAPI (тесты, скрипты) ---
@contextlib.asynccontextmanager
async def async_session_context() -> AsyncGenerator[AsyncSession, None]:
    session: AsyncSession = async_session_factory()
    log.debug("Entering async session context %s", id(session))
    try:
        yield session
        log.debug("Committing session %s from context", id(session))
        await session.commit()
    except Exception:
        log.exception("Rolling back session %s from context due to exception", id(session))
        await session.rollback()
        raise
    finally:
        log.debug("Closing session %s from context", id(session))
        await session.close()


# --- Создание/удаление схемы (для тестов и локального запуска без Alembic) ---
def _import_models() -> None:
    # Модели регистрируются в Base.metadata при импорте модуля
    import datebook.core.events.models  # noqa: F401


async def create_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.debug("Database tables created: %s", sorted(Base.metadata.tables))


async def drop_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    log.debug("Database tables dropped")


# --- Экспорты ---
__all__ = [
    "Base", "engine", "async_session_factory", "AsyncSession",
    "get_async_db_session", "async_session_context",
    "create_db_and_tables", "drop_db_and_tables",
]
