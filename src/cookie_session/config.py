"""Configuration dataclass for session management.

Provides a configuration object to replace a global options object,
making the session middleware portable and testable. One instance is
shared by every request; the only per-request mutable value (max_age)
is copied into each session context.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from . import codec
from .constants import (
    COOKIE_EXPIRED_DATE,
    DEFAULT_COOKIE_KEY,
    SAME_SITE_VALUES,
    SESSION_LIFETIME,
)
from .cookies import CookieOptions
from .sanitize import is_valid_external_key

if TYPE_CHECKING:
    from .session import Session
    from .stores import ExternalKeyAccessor, ExternalStore


def _is_duration(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _require_methods(obj: object, name: str, methods: tuple[str, ...]) -> None:
    for method in methods:
        if not callable(getattr(obj, method, None)):
            raise TypeError(f"{name}.{method} must be callable")


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for cookie session management.

    Attributes:
        key: Name of the cookie carrying the session token or external key.
        max_age: Lifetime in milliseconds, "session" for a browser-session
            cookie, or None for the one-day default.
        auto_commit: Commit at the end of every request. When False, call
            ``await session.manually_commit()`` yourself.
        overwrite: Replace a session cookie set earlier in the same response.
        http_only: Hide the cookie from client-side scripts.
        signed: Sign the cookie (needs secret keys on the middleware).
        same_site: "lax", "strict", "none" or None to omit the attribute.
        secure: Force the Secure attribute. None means "when served over HTTPS".
        path: Cookie path.
        domain: Cookie domain, or None for host-only.
        rolling: Re-issue the cookie on every response.
        renew: Re-issue the cookie when less than half the lifetime remains.
        store: External store; the cookie then only holds an external key.
        context_store: Factory building a store per request from the request.
        external_key: Accessor overriding where the external key is kept.
        encode: Payload encoder (dict -> str).
        decode: Payload decoder (str -> dict).
        genid: External key generator (request -> str).
        prefix: Prefix for generated external keys when genid is not set.
        valid: Extra acceptance check (request, data) -> bool.
        before_save: Hook (request, session) called just before persisting.

    Example:
        >>> config = SessionConfig(
        ...     max_age=3_600_000,  # 1 hour
        ...     rolling=True,
        ... )
    """

    key: str = DEFAULT_COOKIE_KEY
    max_age: int | float | str | None = None
    auto_commit: bool = True
    overwrite: bool = True
    http_only: bool = True
    signed: bool = True
    same_site: str | None = None
    secure: bool | None = None
    path: str = "/"
    domain: str | None = None
    rolling: bool = False
    renew: bool = False
    store: ExternalStore | None = None
    context_store: Callable[[Any], ExternalStore] | None = None
    external_key: ExternalKeyAccessor | None = None
    encode: Callable[[dict[str, Any]], str] = field(default=codec.encode)
    decode: Callable[[str], dict[str, Any]] = field(default=codec.decode)
    genid: Callable[[Any], str] | None = None
    prefix: str | None = None
    valid: Callable[[Any, dict[str, Any]], Any] | None = None
    before_save: Callable[[Any, Session], None] | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.key:
            raise ValueError("key cannot be empty")
        if self.max_age is not None and self.max_age != SESSION_LIFETIME:
            if not _is_duration(self.max_age):
                raise ValueError(
                    f"max_age must be a positive number of milliseconds or {SESSION_LIFETIME!r}"
                )
        if self.same_site is not None and self.same_site.lower() not in SAME_SITE_VALUES:
            raise ValueError(f"same_site must be one of {sorted(SAME_SITE_VALUES)}")
        if self.store is not None:
            _require_methods(self.store, "store", ("get", "set", "destroy"))
        if self.context_store is not None and not callable(self.context_store):
            raise TypeError("context_store must be callable")
        if self.external_key is not None:
            _require_methods(self.external_key, "external_key", ("get", "set"))
        for name in ("encode", "decode", "genid", "valid", "before_save"):
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise TypeError(f"{name} must be callable")
        if self.prefix and not is_valid_external_key(f"{self.prefix}{uuid.UUID(int=0)}"):
            raise ValueError("prefix must be printable ASCII and leave room for a UUID")

    def generate_id(self, request: Any) -> str:
        """Generate a new external key.

        Raises:
            ValueError: If ``genid`` returns a key that could not be read
                back from the session cookie.
        """
        if self.genid is None:
            return f"{self.prefix or ''}{uuid.uuid4()}"
        key = self.genid(request)
        if not isinstance(key, str) or not is_valid_external_key(key):
            raise ValueError("genid must return 1-256 printable ASCII characters")
        return key

    def cookie_options(self, max_age: int | None) -> CookieOptions:
        """Cookie attributes for setting the session cookie."""
        return CookieOptions(
            max_age=max_age,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            http_only=self.http_only,
            same_site=self.same_site,
            overwrite=self.overwrite,
            signed=self.signed,
        )

    def removal_options(self) -> CookieOptions:
        """Cookie attributes for clearing the session cookie."""
        return CookieOptions(
            max_age=None,
            expires=COOKIE_EXPIRED_DATE,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            http_only=self.http_only,
            same_site=self.same_site,
            overwrite=True,
            signed=self.signed,
        )
