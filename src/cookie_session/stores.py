"""External session stores.

When a store is configured the cookie only carries an opaque external
key; the session payload lives in the store under that key.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol, runtime_checkable

from redis.asyncio import Redis

from .constants import ONE_DAY_MS, REDIS_KEY_PREFIX


@runtime_checkable
class ExternalStore(Protocol):
    """Async key/value contract consumed by the session context.

    ``max_age`` is in milliseconds, or the "session" sentinel. ``meta`` holds
    ``request`` plus ``rolling`` (get/set) and ``changed`` (set).
    """

    async def get(self, key: str, max_age: int | str | None, meta: dict[str, Any]) -> Any:
        ...

    async def set(
        self, key: str, data: dict[str, Any], max_age: int | str | None, meta: dict[str, Any]
    ) -> None:
        ...

    async def destroy(self, key: str, meta: dict[str, Any]) -> None:
        ...


@runtime_checkable
class ExternalKeyAccessor(Protocol):
    """Override for where the external key lives (default: the session cookie)."""

    def get(self, request: Any) -> str | None:
        ...

    def set(self, request: Any, key: str) -> None:
        ...


def _ttl_ms(max_age: int | str | None) -> int:
    # "session" lifetime entries still need a bound on the server side
    if isinstance(max_age, (int, float)) and not isinstance(max_age, bool) and max_age > 0:
        return int(max_age)
    return ONE_DAY_MS


class MemoryStore:
    """In-process store for development and tests.

    Entries expire after their TTL. Not shared between processes.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[dict[str, Any], float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def get(
        self, key: str, max_age: int | str | None = None, meta: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        data, deadline = entry
        if deadline <= time.monotonic():
            del self._entries[key]
            return None
        # Copy so callers cannot mutate stored state in place
        return json.loads(json.dumps(data))

    async def set(
        self,
        key: str,
        data: dict[str, Any],
        max_age: int | str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        deadline = time.monotonic() + _ttl_ms(max_age) / 1000
        self._entries[key] = (json.loads(json.dumps(data)), deadline)

    async def destroy(self, key: str, meta: dict[str, Any] | None = None) -> None:
        self._entries.pop(key, None)


class RedisStore:
    """Async Redis-backed session store.

    Payloads are stored as JSON strings with a millisecond TTL, so Redis
    drops expired sessions on its own.

    Usage:
        redis = Redis.from_url("redis://localhost:6379")
        store = RedisStore(redis)
        app.add_middleware(SessionMiddleware, store=store, secret_keys=["..."])
    """

    def __init__(
        self,
        redis: Redis[bytes],
        prefix: str = REDIS_KEY_PREFIX,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            redis: Async Redis client instance.
            prefix: Key prefix for session entries.
            logger: Optional logger for debugging.
        """
        if not prefix:
            raise ValueError("prefix cannot be empty")
        self._redis = redis
        self._prefix = prefix
        self._logger = logger

    def _session_key(self, key: str) -> str:
        """Build Redis key for session data."""
        return f"{self._prefix}{key}"

    async def get(
        self, key: str, max_age: int | str | None = None, meta: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        raw = await self._redis.get(self._session_key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(
        self,
        key: str,
        data: dict[str, Any],
        max_age: int | str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        await self._redis.set(
            self._session_key(key),
            json.dumps(data, separators=(",", ":")),
            px=_ttl_ms(max_age),
        )
        if self._logger:
            self._logger.debug(
                "Session stored: %s, changed=%s",
                key[:8] + "...",
                (meta or {}).get("changed"),
            )

    async def destroy(self, key: str, meta: dict[str, Any] | None = None) -> None:
        result = await self._redis.delete(self._session_key(key))
        if self._logger:
            self._logger.debug(
                "Session destroyed: %s, existed=%s", key[:8] + "...", result > 0
            )
