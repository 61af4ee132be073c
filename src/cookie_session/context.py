"""Context variable helpers for session access.

Uses Python's contextvars to store the current request's session context,
enabling dependency injection without passing the request around.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING

from .exceptions import SessionContextError

if TYPE_CHECKING:
    from .manager import SessionContext
    from .session import Session

# ContextVar for current request's session context (DI pattern)
_current_session_context: ContextVar[SessionContext | None] = ContextVar(
    "session_context", default=None
)


def set_current_session_context(context: SessionContext | None) -> None:
    """Set session context for current request (called by middleware).

    Args:
        context: The session context to set, or None to clear.
    """
    _current_session_context.set(context)


def get_current_session_context() -> SessionContext | None:
    """Get session context for current request.

    Returns:
        The current session context, or None if not set.
    """
    return _current_session_context.get()


def get_current_session() -> Session | None:
    """Get the current request's session, materializing it if needed.

    Returns:
        The session, or None if it was set to None during this request.

    Raises:
        SessionContextError: If called outside a request handled by the middleware.
    """
    context = _current_session_context.get()
    if context is None:
        raise SessionContextError()
    return context.get()
