"""Async SQLAlchemy engine and request-scoped sessions."""

import threading
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from bill.core.config import settings

# Engines hold event-loop bound connections, so they are built on first use in
# the process (and loop) that needs them rather than at import time
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_lock = threading.Lock()


def _engine_options() -> dict[str, Any]:
    if settings.DEBUG:
        # pytest-asyncio opens a fresh loop per test; pooled connections would outlive it
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """Return the shared engine for DATABASE_URL, creating it on first call."""
    global _engine  # noqa: PLW0603
    with _lock:
        if _engine is None:
            _engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, **_engine_options())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Return the session factory bound to the shared engine.

    Sessions keep attribute values after commit so repositories can map rows
    to entities without another round trip.
    """
    global _session_factory  # noqa: PLW0603
    engine = get_engine()
    with _lock:
        if _session_factory is None:
            _session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    async with get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close the shared engine's connections; a no-op if no engine was built."""
    global _engine, _session_factory  # noqa: PLW0603
    with _lock:
        engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
