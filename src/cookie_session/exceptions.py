"""Custom exceptions for cookie session management.

Provides a hierarchy of exceptions for better error handling
in session operations.
"""

from __future__ import annotations


class SessionError(Exception):
    """Base exception for session-related errors.

    All session-specific exceptions inherit from this class,
    allowing callers to catch all session errors with a single except clause.
    """


class SessionDecodeError(SessionError, ValueError):
    """Raised when a session token is not a valid encoded payload.

    A malformed cookie is safe to discard: the session context treats it
    as "no session" and starts a fresh one.
    """

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "Malformed session payload"
        super().__init__(message)


class SessionCookieError(SessionError):
    """Raised when decoding the session cookie fails for a non-syntax reason.

    The broken cookie has already been cleared by the time this is raised.
    The original exception is chained as ``__cause__``.

    Attributes:
        cookie_name: Name of the cleared cookie.
        headers: ``Set-Cookie`` header values an error response must still
            apply so the client drops the broken cookie.
    """

    def __init__(
        self,
        cookie_name: str,
        headers: list[str],
        message: str | None = None,
    ) -> None:
        self.cookie_name = cookie_name
        self.headers = list(headers)
        if message is None:
            message = f"Failed to decode session cookie {cookie_name!r}"
        super().__init__(message)


class SessionValueError(SessionError, TypeError):
    """Raised when the session is assigned something other than a mapping or None."""

    def __init__(self, value: object, message: str | None = None) -> None:
        self.value_type = type(value).__name__
        if message is None:
            message = f"session can only be set as None or a mapping, not {self.value_type}"
        super().__init__(message)


class SessionContextError(SessionError):
    """Raised when no session context is available.

    This occurs when session operations are attempted outside a request
    handled by the session middleware.
    """

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "No session context - middleware not set up or called outside a request"
        super().__init__(message)
