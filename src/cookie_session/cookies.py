"""Cookie attributes and the cookie jar contract.

The session core never touches HTTP headers directly. It reads and writes
named cookies through a :class:`CookieJar`; framework integrations (see
``contrib.starlette``) supply the implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class CookieOptions:
    """Attributes applied when a cookie is set.

    Attributes:
        max_age: Lifetime in milliseconds, or None for a browser-session cookie.
        expires: Explicit HTTP date, used to clear a cookie.
        path: Cookie path.
        domain: Cookie domain, or None for host-only.
        secure: Send only over HTTPS. None lets the jar decide.
        http_only: Hide from client-side scripts.
        same_site: "lax", "strict", "none" or None to omit.
        overwrite: Replace a cookie of the same name set earlier in this response.
        signed: Also emit a signature cookie.
    """

    max_age: int | None = None
    expires: str | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool | None = None
    http_only: bool = True
    same_site: str | None = None
    overwrite: bool = True
    signed: bool = True


@runtime_checkable
class CookieJar(Protocol):
    """Read request cookies and collect response cookies."""

    def get(self, name: str, signed: bool = True) -> str | None:
        """Return the cookie value, or None if absent or its signature fails."""
        ...

    def set(self, name: str, value: str, options: CookieOptions) -> None:
        """Queue a cookie for the response. An empty value with a past expiry clears it."""
        ...

    @property
    def headers(self) -> list[str]:
        """Pending ``Set-Cookie`` header values."""
        ...
