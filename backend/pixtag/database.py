"""
PixTag Backend — Database Session Management
=============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine, provides a session dependency that
       auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Supported backends:
    PostgreSQL (asyncpg): pooled connections, row-level locking, ON CONFLICT.
    SQLite (aiosqlite):   every connection enables foreign keys (cascades are
                          off by default in SQLite) and every transaction
                          starts with BEGIN IMMEDIATE, which takes the write
                          lock up front so concurrent read-then-write
                          sequences queue instead of failing with
                          "database is locked" half way through.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pixtag.config import settings

logger = logging.getLogger(__name__)


def _configure_sqlite(async_engine: AsyncEngine) -> None:
    """Attach the connection and transaction hooks SQLite needs."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Take over BEGIN emission from the driver (see _on_begin)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine configured for the given database URL.

    What:    Applies pool settings for server databases and the SQLite hooks
             for SQLite URLs.
    Who:     Called once below for the application engine, and by the test
             suite to build engines over temporary databases.
    """
    echo = settings.log_level == "DEBUG"

    if database_url.startswith("sqlite"):
        async_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": 30},
        )
        _configure_sqlite(async_engine)
        return async_engine

    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: rows stay readable after the transaction commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by Alembic and by init_database().
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits anything still pending
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Services open their own explicit transaction through
    AnnotationStore.transaction(), so the commit here is normally a no-op.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_database(
    target_engine: AsyncEngine = None,
    default_labels=None,
) -> None:
    """
    Create missing tables and seed the default label vocabulary.

    What:    CREATE TABLE IF NOT EXISTS for every model, then an
             insert-if-absent for each default label.
    When:    Application startup when settings.auto_create_schema is on,
             and by tests over their temporary database.
    Why idempotent: Safe to run on every restart; existing rows are untouched.
    """
    # Imported here: the models and the store import Base from this module
    from pixtag import models  # noqa: F401
    from pixtag.store import AnnotationStore

    target_engine = target_engine or engine
    if default_labels is None:
        default_labels = settings.default_labels_list

    async with target_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(target_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        store = AnnotationStore(session)
        async with store.transaction():
            for name in default_labels:
                await store.create_label(name)

    logger.info("Database ready (%d default labels ensured)", len(default_labels))


async def dispose_engine() -> None:
    """Close all pooled connections; called during application shutdown."""
    await engine.dispose()
