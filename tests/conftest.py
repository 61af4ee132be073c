"""Test fixtures for py-cookie-session package."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest

from cookie_session import (
    MemoryStore,
    SessionConfig,
    SessionEvent,
    SessionEvents,
    set_current_session_context,
)


@pytest.fixture
def mock_store() -> AsyncMock:
    """Create a mock external store for testing."""
    store = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.set = AsyncMock(return_value=None)
    store.destroy = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client for testing."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cookie_config() -> SessionConfig:
    """Unsigned cookie-backed config, keeps headers easy to inspect."""
    return SessionConfig(signed=False)


@pytest.fixture
def store_config(mock_store: AsyncMock) -> SessionConfig:
    """Unsigned store-backed config with predictable external keys."""
    counter = iter(range(1, 1000))
    return SessionConfig(
        signed=False,
        store=mock_store,
        genid=lambda request: f"key-{next(counter)}",
    )


@pytest.fixture
def events() -> tuple[SessionEvents, list[SessionEvent]]:
    """Event registry recording every event it receives."""
    registry = SessionEvents()
    received: list[SessionEvent] = []
    for name in ("session:missed", "session:expired", "session:invalid"):
        registry.on(name, received.append)
    return registry, received


@pytest.fixture(autouse=True)
def reset_session_context() -> Generator[None, None, None]:
    """Clean up session context for each test."""
    set_current_session_context(None)
    yield
    set_current_session_context(None)