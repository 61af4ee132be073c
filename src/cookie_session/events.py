"""Observable session events.

The session context reports rejected sessions here without interrupting
the request: ``session:missed`` (store returned nothing for a key),
``session:expired`` (payload past its expiry) and ``session:invalid``
(rejected by the configured validity predicate).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("cookie_session.events")


@dataclass(frozen=True)
class SessionEvent:
    """A rejected-session notification."""

    name: str
    key: str | None
    value: Any
    request: Any


SessionListener = Callable[[SessionEvent], Any]


class SessionEvents:
    """Registry of session event listeners.

    Listeners run on the next event loop iteration, never inside the
    request's own call stack.

    Usage:
        events = SessionEvents()
        events.on("session:expired", lambda event: print(event.key))
        app.add_middleware(SessionMiddleware, events=events, secret_keys=["..."])
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[SessionListener]] = {}

    def on(self, name: str, listener: SessionListener) -> None:
        """Register a listener for event *name*."""
        self._listeners.setdefault(name, []).append(listener)

    def off(self, name: str, listener: SessionListener) -> None:
        """Remove a previously registered listener."""
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, name: str) -> list[SessionListener]:
        return list(self._listeners.get(name, []))

    def emit(self, name: str, *, key: str | None, value: Any, request: Any) -> None:
        """Schedule delivery of an event to its listeners."""
        if not self._listeners.get(name):
            return
        event = SessionEvent(name=name, key=key, value=value, request=request)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._dispatch(event)
            return
        loop.call_soon(self._dispatch, event)

    def _dispatch(self, event: SessionEvent) -> None:
        for listener in self.listeners(event.name):
            try:
                listener(event)
            except Exception:
                # A broken listener must never affect the request that emitted
                logger.exception("Session event listener failed: %s", event.name)
