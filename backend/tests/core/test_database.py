"""Tests for the lazily built engine and its shutdown."""

from unittest.mock import AsyncMock, Mock

import pytest
from bill.core import database
from bill.core.database import dispose_engine


@pytest.mark.asyncio
async def test_dispose_engine_without_engine_builds_nothing() -> None:
    await dispose_engine()

    assert database._engine is None  # type: ignore[attr-defined]
    assert database._session_factory is None  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_dispose_engine_closes_and_forgets_engine() -> None:
    """Test that the engine is disposed and the next caller gets a fresh one."""
    engine = Mock()
    engine.dispose = AsyncMock()
    database._engine = engine  # type: ignore[attr-defined]
    database._session_factory = Mock()  # type: ignore[attr-defined]

    await dispose_engine()

    engine.dispose.assert_awaited_once()
    assert database._engine is None  # type: ignore[attr-defined]
    assert database._session_factory is None  # type: ignore[attr-defined]
