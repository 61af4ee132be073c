"""Shared helpers for building requests, contexts and reading cookies."""

from __future__ import annotations

from http.cookies import Morsel, SimpleCookie
from typing import Any

from starlette.requests import Request

from cookie_session import CookieSigner, SessionConfig, SessionContext, SessionEvents
from cookie_session.contrib.starlette import StarletteCookieJar

SECRET_KEYS = ["test-secret-key"]


def create_mock_request(
    cookies: dict[str, str] | None = None,
    scheme: str = "http",
) -> Request:
    """Create a Starlette Request with optional cookies."""
    scope: dict[str, object] = {
        "type": "http",
        "method": "GET",
        "scheme": scheme,
        "path": "/test",
        "query_string": b"",
        "headers": [],
        "server": ("testserver", 80),
    }
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        scope["headers"] = [(b"cookie", cookie_header.encode())]

    return Request(scope)


def signed_cookies(name: str, value: str, keys: list[str] = SECRET_KEYS) -> dict[str, str]:
    """Cookie and companion signature cookie, as a browser would send them."""
    signer = CookieSigner(keys)
    return {name: value, signer.signature_name(name): signer.sign(name, value)}


def make_context(
    config: SessionConfig | None = None,
    cookies: dict[str, str] | None = None,
    events: SessionEvents | None = None,
    scheme: str = "http",
) -> SessionContext:
    """Build a session context over a fresh request."""
    config = config or SessionConfig(signed=False)
    request = create_mock_request(cookies, scheme=scheme)
    signer = CookieSigner(SECRET_KEYS) if config.signed else None
    return SessionContext(request, config, StarletteCookieJar(request, signer), events=events)


def parse_set_cookies(headers: list[str]) -> dict[str, Morsel[Any]]:
    """Map cookie name to its morsel, for a list of Set-Cookie header values."""
    parsed: dict[str, Morsel[Any]] = {}
    for header in headers:
        cookie: SimpleCookie = SimpleCookie()
        cookie.load(header)
        for name, morsel in cookie.items():
            parsed[name] = morsel
    return parsed


def cookie_values(headers: list[str]) -> dict[str, str]:
    """Map cookie name to value, for a list of Set-Cookie header values."""
    return {name: morsel.value for name, morsel in parse_set_cookies(headers).items()}
