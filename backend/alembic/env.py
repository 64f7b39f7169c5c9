"""
PixTag Backend — Alembic Environment
=====================================

What:  Migration runner for the images / labels / annotations schema.
How:   DATABASE_URL from pixtag.config wins over anything in alembic.ini,
       so `alembic upgrade head` migrates the same database the app uses.
       Online runs go through the async driver (asyncpg or aiosqlite).

Usage (from backend/):
    alembic upgrade head        apply 001 (tables + cat/dog/car seed)
    alembic upgrade head --sql  print the SQL instead of running it

When migrations own the schema, set AUTO_CREATE_SCHEMA=false so startup
does not create tables on its own.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from pixtag.config import settings
from pixtag.database import Base
import pixtag.models  # noqa: F401  (registers the three tables on Base.metadata)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

config.set_main_option("sqlalchemy.url", settings.database_url)

target_metadata = Base.metadata

# SQLite cannot ALTER constraints in place; batch mode rebuilds the table
MIGRATION_OPTIONS = {
    "target_metadata": target_metadata,
    "render_as_batch": settings.is_sqlite,
    "compare_type": True,
}


def run_migrations_offline() -> None:
    """--sql mode: render statements against the URL without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Open one unpooled async connection and run the migrations through it."""
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
