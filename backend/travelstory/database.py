"""
TravelStory Backend - Database Session Management
===================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   The store is a process-scoped resource: one engine is created at
       startup and every request receives its own session through
       dependency injection instead of reaching for a global connection.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route dependencies (see dependencies.py) and Alembic.
When:  Engine is created at module import; sessions are created per-request.

Transaction model:
    Every mutation in this service touches exactly one row (a user or a
    story), so a single session-per-request transaction is sufficient.
    Concurrent edits of the same story are last-write-wins at the store.
"""

import json
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from travelstory.config import settings


def _json_serializer(value: Any) -> str:
    # Keep non-ASCII place names searchable as written (e.g. "Zürich")
    return json.dumps(value, ensure_ascii=False)


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build create_async_engine() keyword arguments for a connection URL.

    SQLite (used in tests and local experiments) does not take pool sizing
    arguments, so those are only passed for server databases.
    """
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "json_serializer": _json_serializer,
    }
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,  # Recycle after 1 hour to prevent stale connections
        )
    return options


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, **engine_options(database_url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models read attributes after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so that they share one metadata
    object (used by Alembic and by the test suite's create_all()).
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route's services
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception is propagated to the global error handlers,
        which return the appropriate HTTP status codes.
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
async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (application shutdown)."""
    await engine.dispose()
