"""Starlette/FastAPI middleware for cookie sessions.

Creates a session context for each request, stores it in both
request.state and contextvars, and commits it when the response is
ready, including when the handler raised.

Cookie-backed sessions are loaded lazily on first access. Store-backed
sessions are fetched before the handler runs so they are available
without awaiting.

Install with: pip install py-cookie-session[starlette]
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from email.utils import formatdate
from http.cookies import SimpleCookie
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import HTTPConnection, Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from ..config import SessionConfig
from ..context import set_current_session_context
from ..cookies import CookieOptions
from ..events import SessionEvents
from ..exceptions import SessionContextError, SessionCookieError
from ..manager import SessionContext
from ..session import Session
from ..signing import CookieSigner


class StarletteCookieJar:
    """Cookie jar over a Starlette request.

    Reads cookies from the request and collects ``Set-Cookie`` headers
    until :meth:`apply` copies them onto the response.
    """

    def __init__(self, request: HTTPConnection, signer: CookieSigner | None = None) -> None:
        self._request = request
        self._signer = signer
        self._pending: dict[str, list[str]] = {}

    def _require_signer(self) -> CookieSigner:
        if self._signer is None:
            raise RuntimeError("Signed cookies need secret keys")
        return self._signer

    def get(self, name: str, signed: bool = True) -> str | None:
        value = self._request.cookies.get(name)
        if value is None or not signed:
            return value

        signer = self._require_signer()
        signature = self._request.cookies.get(signer.signature_name(name))
        if not signer.verify(name, value, signature):
            return None
        return value

    def set(self, name: str, value: str, options: CookieOptions) -> None:
        self._queue(name, self._build(name, value, options), options.overwrite)
        if options.signed:
            signer = self._require_signer()
            self._queue(
                signer.signature_name(name),
                self._build(signer.signature_name(name), signer.sign(name, value), options),
                options.overwrite,
            )

    @property
    def headers(self) -> list[str]:
        return [header for headers in self._pending.values() for header in headers]

    def apply(self, response: Response) -> None:
        """Append pending cookies to the response, skipping ones already present."""
        existing = response.headers.getlist("set-cookie")
        for header in self.headers:
            if header not in existing:
                response.headers.append("set-cookie", header)

    def _queue(self, name: str, header: str, overwrite: bool) -> None:
        if overwrite:
            self._pending[name] = [header]
        else:
            self._pending.setdefault(name, []).append(header)

    def _build(self, name: str, value: str, options: CookieOptions) -> str:
        cookie: SimpleCookie = SimpleCookie()
        cookie[name] = value
        morsel = cookie[name]
        morsel["path"] = options.path
        if options.domain:
            morsel["domain"] = options.domain
        if options.expires is not None:
            morsel["expires"] = options.expires
        elif options.max_age is not None:
            morsel["max-age"] = int(options.max_age) // 1000
            morsel["expires"] = formatdate(time.time() + options.max_age / 1000, usegmt=True)
        secure = options.secure
        if secure is None:
            secure = self._request.url.scheme in ("https", "wss")
        if secure:
            morsel["secure"] = True
        if options.http_only:
            morsel["httponly"] = True
        if options.same_site:
            morsel["samesite"] = options.same_site
        return cookie.output(header="").strip()


class SessionMiddleware(BaseHTTPMiddleware):
    """Middleware managing a session per request.

    Sets the session context in:
    - request.state.session_context (for direct access in routes)
    - contextvars (for get_current_session())

    Usage:
        from fastapi import FastAPI
        from cookie_session.contrib.starlette import SessionMiddleware, get_session

        app = FastAPI()
        app.add_middleware(SessionMiddleware, secret_keys=["change-me"])

        @app.get("/")
        async def index(request: Request):
            session = get_session(request)
            session["views"] = session.get("views", 0) + 1
            return {"views": session["views"]}

        # With an external store:
        app.add_middleware(
            SessionMiddleware,
            secret_keys=["change-me"],
            store=RedisStore(Redis.from_url("redis://localhost:6379")),
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        config: SessionConfig | None = None,
        secret_keys: str | bytes | Sequence[str | bytes] | None = None,
        events: SessionEvents | None = None,
        logger: logging.Logger | None = None,
        **options: Any,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            config: Session configuration. Built from ``options`` if None.
            secret_keys: Keys for cookie signatures, oldest first.
            events: Registry receiving missed/expired/invalid session events.
            logger: Optional logger for debugging.
            **options: SessionConfig fields, used when config is None.

        Raises:
            TypeError: If app is not an ASGI application, or both config and
                options are given.
            ValueError: If signed cookies are enabled without secret keys.
        """
        if app is None or not callable(app):
            raise TypeError("app instance required: SessionMiddleware(app, ...)")
        if config is not None and options:
            raise TypeError("Pass either config or keyword options, not both")
        super().__init__(app)
        self._config = config or SessionConfig(**options)
        if self._config.signed and not secret_keys:
            raise ValueError("secret_keys are required when signed=True")
        self._signer = CookieSigner(secret_keys) if secret_keys else None
        self._events = events if events is not None else SessionEvents()
        self._logger = logger

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def events(self) -> SessionEvents:
        return self._events

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Load the session around the request and commit it afterwards."""
        cookies = StarletteCookieJar(request, self._signer)
        context = SessionContext(
            request, self._config, cookies, events=self._events, logger=self._logger
        )
        # Store in request.state for direct access
        request.state.session_context = context
        # Store in contextvars for get_current_session()
        set_current_session_context(context)

        try:
            if context.store is not None:
                await context.init_from_external()
            try:
                response = await call_next(request)
            finally:
                # Runs on handler errors too; the original error is re-raised afterwards
                if self._config.auto_commit:
                    result = await context.commit()
                    if self._logger:
                        self._logger.debug("Session commit: %s", result.value)
        finally:
            # Clean up contextvars
            set_current_session_context(None)

        cookies.apply(response)
        return response


def get_session_context(request: HTTPConnection) -> SessionContext:
    """Return the session context the middleware attached to *request*.

    Raises:
        SessionContextError: If the middleware is not installed.
    """
    context = getattr(request.state, "session_context", None)
    if context is None:
        raise SessionContextError()
    return context


def get_session(request: HTTPConnection) -> Session | None:
    """Return the request's session, loading it on first access."""
    return get_session_context(request).get()


def set_session(request: HTTPConnection, value: Mapping[str, Any] | None) -> None:
    """Replace the request's session; None removes it on commit."""
    get_session_context(request).set(value)


async def session_error_handler(request: Request, exc: Exception) -> Response:
    """Exception handler for :class:`SessionCookieError`.

    Responds 500 while still clearing the broken session cookie.

    Usage:
        app = Starlette(exception_handlers={SessionCookieError: session_error_handler})
    """
    response = PlainTextResponse("Internal Server Error", status_code=500)
    if isinstance(exc, SessionCookieError):
        for header in exc.headers:
            response.headers.append("set-cookie", header)
    return response
