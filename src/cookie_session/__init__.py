"""Cookie and external-store sessions for ASGI applications.

Sessions are kept either entirely in a signed cookie (base64 JSON) or in
an external store referenced by an opaque key in the cookie. The wire
format is compatible with koa-session.

Basic usage:
    from cookie_session import SessionConfig, SessionContext

    context = SessionContext(request, SessionConfig(), cookie_jar)
    session = context.get()
    session["cart_count"] = 5
    await context.commit()

With FastAPI/Starlette:
    from cookie_session.contrib.starlette import SessionMiddleware, get_session

    app = FastAPI()
    app.add_middleware(SessionMiddleware, secret_keys=["change-me"])

    @app.get("/")
    async def index(request: Request):
        get_session(request)["cart_count"] = 5

With Redis:
    from redis.asyncio import Redis
    from cookie_session import RedisStore

    store = RedisStore(Redis.from_url("redis://localhost:6379"))
    app.add_middleware(SessionMiddleware, secret_keys=["change-me"], store=store)
"""

from __future__ import annotations

from .codec import decode, encode, hash_data
from .config import SessionConfig
from .constants import (
    COOKIE_EXPIRED_DATE,
    DEFAULT_COOKIE_KEY,
    ONE_DAY_MS,
    SESSION_EXPIRED,
    SESSION_INVALID,
    SESSION_LIFETIME,
    SESSION_MISSED,
    STORE_TTL_BUFFER_MS,
)
from .context import (
    get_current_session,
    get_current_session_context,
    set_current_session_context,
)
from .cookies import CookieJar, CookieOptions
from .events import SessionEvent, SessionEvents
from .exceptions import (
    SessionContextError,
    SessionCookieError,
    SessionDecodeError,
    SessionError,
    SessionValueError,
)
from .manager import CommitResult, SessionContext, SessionState
from .sanitize import sanitize_external_key
from .session import Session, SessionMetadata
from .signing import CookieSigner
from .stores import ExternalKeyAccessor, ExternalStore, MemoryStore, RedisStore

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "SessionContext",
    "SessionConfig",
    "Session",
    "SessionMetadata",
    "SessionState",
    "CommitResult",
    # Collaborators
    "CookieJar",
    "CookieOptions",
    "CookieSigner",
    "ExternalStore",
    "ExternalKeyAccessor",
    "MemoryStore",
    "RedisStore",
    # Events
    "SessionEvent",
    "SessionEvents",
    # Exceptions
    "SessionError",
    "SessionDecodeError",
    "SessionCookieError",
    "SessionValueError",
    "SessionContextError",
    # Context helpers
    "set_current_session_context",
    "get_current_session_context",
    "get_current_session",
    # Utility functions
    "encode",
    "decode",
    "hash_data",
    "sanitize_external_key",
    # Constants
    "DEFAULT_COOKIE_KEY",
    "ONE_DAY_MS",
    "SESSION_LIFETIME",
    "STORE_TTL_BUFFER_MS",
    "COOKIE_EXPIRED_DATE",
    "SESSION_MISSED",
    "SESSION_EXPIRED",
    "SESSION_INVALID",
]
