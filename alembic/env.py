# alembic/env.py

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

# --- Конфигурация ---
# Это объект конфигурации Alembic, читает alembic.ini
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# --- Метаданные Моделей ---
from datebook.config import SUPPORTED_DB_DRIVERS, settings
from datebook.db.base import Base

# Импортируем модули с моделями, чтобы Alembic их "увидел"
import datebook.core.events.models  # noqa: F401

target_metadata = Base.metadata


def _database_url() -> str:
    """URL из alembic.ini (-x / sqlalchemy.url) имеет приоритет над DATABASE_URL."""
    db_url = config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL

    # Адаптируем синхронные схемы к async-драйверам
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("postgresql+psycopg2://"):
        db_url = db_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("sqlite://"):
        db_url = db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    if not db_url.startswith(SUPPORTED_DB_DRIVERS):
        raise ValueError(f"Unsupported DB URL scheme for async operation: {db_url}")
    return db_url


# --- Функции Выполнения Миграций ---

def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.
    Генерирует SQL скрипты без подключения к БД.
    """
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",  # ALTER TABLE в SQLite ограничен
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    # NullPool: Alembic выполняет короткие операции
    connectable = create_async_engine(_database_url(), poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
