"""Session lifecycle for a single request.

A :class:`SessionContext` owns one request's session: it loads it (from
the cookie, or from an external store via a key kept in the cookie),
hands it to request handlers, and on commit decides whether anything
must be written back. Nothing is written for sessions that were never
touched, are new and still empty, or did not change.
"""

from __future__ import annotations

import binascii
import json
import logging
import time
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .codec import hash_data
from .config import SessionConfig
from .constants import (
    EXPIRE_FIELD,
    MAX_AGE_FIELD,
    ONE_DAY_MS,
    SESSION_EXPIRED,
    SESSION_INVALID,
    SESSION_LIFETIME,
    SESSION_LIFETIME_FIELD,
    SESSION_MISSED,
    STORE_TTL_BUFFER_MS,
)
from .cookies import CookieJar
from .events import SessionEvents
from .exceptions import SessionCookieError, SessionDecodeError, SessionValueError
from .sanitize import sanitize_external_key
from .session import Session
from .stores import ExternalStore

# Decode failures meaning "garbage cookie": start a fresh session instead of failing
MALFORMED_PAYLOAD_ERRORS: tuple[type[Exception], ...] = (
    SessionDecodeError,
    json.JSONDecodeError,
    binascii.Error,
    UnicodeDecodeError,
)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class SessionState(Enum):
    """Where the context's session stands."""

    UNINITIALIZED = "uninitialized"
    FRESH = "fresh"
    RESTORED = "restored"
    REMOVED = "removed"


class CommitResult(Enum):
    """What a commit did."""

    UNTOUCHED = "untouched"
    REMOVED = "removed"
    SAVED = "saved"
    UNCHANGED = "unchanged"


class SessionContext:
    """Per-request session lifecycle controller.

    Usage:
        context = SessionContext(request, config, cookie_jar)
        if context.store:
            await context.init_from_external()
        session = context.get()
        session["user_id"] = 42
        await context.commit()
    """

    def __init__(
        self,
        request: Any,
        config: SessionConfig,
        cookies: CookieJar,
        events: SessionEvents | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            request: The framework request, passed through to hooks and the store.
            config: Shared session configuration.
            cookies: Cookie jar for this request.
            events: Optional registry receiving missed/expired/invalid events.
            logger: Optional logger for debugging.
        """
        self.request = request
        self.config = config
        self.cookies = cookies
        self._events = events
        self._logger = logger
        # Per-request copy; Session.max_age writes here, never to the shared config
        self.max_age: int | float | str | None = config.max_age
        self.store: ExternalStore | None = (
            config.context_store(request) if config.context_store else config.store
        )
        self.state = SessionState.UNINITIALIZED
        self.external_key: str | None = None
        self.prev_hash: int | None = None
        self._session: Session | None = None

    def get(self) -> Session | None:
        """Return the session, creating or loading it on first access.

        Returns:
            The session, or None if it was set to None during this request.
        """
        if self._session is not None:
            return self._session
        if self.state is SessionState.REMOVED:
            return None

        if self.store is not None:
            # init_from_external() normally ran before the handlers
            self._create()
        else:
            self.init_from_cookie()
        return self._session

    def set(self, value: Mapping[str, Any] | None) -> None:
        """Replace the session.

        Args:
            value: None to remove the session on commit, or a mapping of new data.

        Raises:
            SessionValueError: If value is neither None nor a mapping.
        """
        if value is None:
            # Keep external_key so the store entry gets destroyed on commit
            self._session = None
            self.state = SessionState.REMOVED
            return
        if isinstance(value, Mapping):
            self._create(dict(value), self.external_key)
            return
        raise SessionValueError(value)

    async def init_from_external(self) -> None:
        """Load the session from the external store. Runs before request handlers."""
        if self.store is None:
            raise RuntimeError("init_from_external() requires an external store")

        if self.config.external_key is not None:
            external_key = self.config.external_key.get(self.request)
        else:
            external_key = sanitize_external_key(
                self.cookies.get(self.config.key, signed=self.config.signed),
                logger=self._logger,
            )

        if not external_key:
            self._create()
            return

        data = await self.store.get(
            external_key,
            self.max_age,
            {"rolling": self.config.rolling, "request": self.request},
        )
        if not self.valid(data, external_key):
            if self._logger:
                self._logger.debug("Invalid session data, creating a new session")
            self._create()
            return

        self._create(data, external_key)
        self.state = SessionState.RESTORED
        self.prev_hash = hash_data(self._session.to_json())

    def init_from_cookie(self) -> None:
        """Load the session from the cookie payload.

        Raises:
            SessionCookieError: If the decoder fails for a reason other than a
                malformed payload. The cookie is cleared first.
        """
        token = self.cookies.get(self.config.key, signed=self.config.signed)
        if not token:
            self._create()
            return

        try:
            data = self.config.decode(token)
        except MALFORMED_PAYLOAD_ERRORS as err:
            # Garbage cookies are treated as no session at all
            if self._logger:
                self._logger.debug("Session cookie decode failed: %s", err)
            self._create()
            return
        except Exception as err:
            # Clear the cookie so the next request does not fail the same way
            self.cookies.set(self.config.key, "", self.config.removal_options())
            if self._logger:
                self._logger.warning(
                    "Session cookie %s cleared after decode error: %s", self.config.key, err
                )
            raise SessionCookieError(self.config.key, self.cookies.headers) from err

        if not self.valid(data):
            if self._logger:
                self._logger.debug("Invalid session data, creating a new session")
            self._create()
            return

        self._create(data)
        self.state = SessionState.RESTORED
        self.prev_hash = hash_data(self._session.to_json())

    def valid(self, data: Any, key: str | None = None) -> bool:
        """Check loaded session data, reporting each rejection as an event.

        Args:
            data: Decoded payload or store value.
            key: External key the data was loaded with, if any.

        Returns:
            False if the data is missing, expired, or rejected by the
            configured ``valid`` predicate.
        """
        if data is None:
            self._emit(SESSION_MISSED, key, data)
            return False

        if not isinstance(data, Mapping):
            self._emit(SESSION_INVALID, key, data)
            return False

        expire = data.get(EXPIRE_FIELD)
        if _is_number(expire) and expire < now_ms():
            if self._logger:
                self._logger.debug("Expired session")
            self._emit(SESSION_EXPIRED, key, data)
            return False

        if self.config.valid is not None and not self.config.valid(self.request, data):
            if self._logger:
                self._logger.debug("Session rejected by valid()")
            self._emit(SESSION_INVALID, key, data)
            return False

        return True

    def _emit(self, name: str, key: str | None, value: Any) -> None:
        if self._events is not None:
            self._events.emit(name, key=key, value=value, request=self.request)

    def _create(
        self,
        data: Mapping[str, Any] | None = None,
        external_key: str | None = None,
    ) -> None:
        if self.store is not None:
            self.external_key = (
                external_key if external_key is not None else self.config.generate_id(self.request)
            )
        self._session = Session(self, data, self.external_key)
        self.state = SessionState.FRESH

    async def commit(self, save: bool = False, regenerate: bool = False) -> CommitResult:
        """Write the session back if anything requires it.

        Args:
            save: Persist even if unchanged.
            regenerate: Remove the persisted session and save under a new key.

        Returns:
            What the commit did.
        """
        if self.state is SessionState.UNINITIALIZED:
            return CommitResult.UNTOUCHED

        if self.state is SessionState.REMOVED:
            await self.remove()
            return CommitResult.REMOVED

        session = self._session
        regenerate = regenerate or session.meta.regenerate
        if regenerate:
            await self.remove()
            if self.store is not None:
                self.external_key = self.config.generate_id(self.request)
                session.meta.external_key = self.external_key

        reason = "force" if save or regenerate or session.meta.require_save else self.should_save()
        if self._logger:
            self._logger.debug("Should save session: %r", reason)
        if not reason:
            return CommitResult.UNCHANGED

        if self.config.before_save is not None:
            self.config.before_save(self.request, session)

        await self.save(changed=reason == "changed")

        session.meta.require_save = False
        session.meta.regenerate = False
        self.prev_hash = hash_data(session.to_json())
        return CommitResult.SAVED

    def should_save(self) -> str:
        """Reason to persist an unforced session: "changed", "rolling", "renew" or ""."""
        session = self._session
        data = session.to_json()

        # New and never populated: nothing worth a cookie
        if self.prev_hash is None and not data:
            return ""

        if self.prev_hash != hash_data(data):
            return "changed"

        if self.config.rolling:
            return "rolling"

        if self.config.renew:
            expire = session.meta.expire
            max_age = self.max_age
            # Renew once less than half the lifetime remains
            if _is_number(expire) and _is_number(max_age) and expire - now_ms() < max_age / 2:
                return "renew"

        return ""

    async def remove(self) -> None:
        """Destroy the store entry, if any, and clear the session cookie."""
        if self.store is not None and self.external_key:
            await self.store.destroy(self.external_key, {"request": self.request})
            if self._logger:
                self._logger.debug("Session removed: %s", self.external_key[:8] + "...")
        self.cookies.set(self.config.key, "", self.config.removal_options())

    async def save(self, changed: bool) -> None:
        """Persist the session to the store or the cookie.

        Args:
            changed: Whether the data changed since load, passed to the store.

        Raises:
            Exception: Whatever the encoder or the store raises.
        """
        data = self._session.to_json()

        max_age = self.max_age
        if max_age == SESSION_LIFETIME:
            # No expiry in the payload; the cookie lives as long as the browser session
            data[SESSION_LIFETIME_FIELD] = True
            cookie_max_age = None
        else:
            if not _is_number(max_age) or max_age <= 0:
                max_age = ONE_DAY_MS
            data[EXPIRE_FIELD] = now_ms() + max_age
            data[MAX_AGE_FIELD] = max_age
            cookie_max_age = int(max_age)

        options = self.config.cookie_options(cookie_max_age)
        external_key = self.external_key

        if self.store is not None and external_key:
            ttl = max_age + STORE_TTL_BUFFER_MS if _is_number(max_age) else max_age
            await self.store.set(
                external_key,
                data,
                ttl,
                {"changed": changed, "rolling": self.config.rolling, "request": self.request},
            )
            if self.config.external_key is not None:
                self.config.external_key.set(self.request, external_key)
            else:
                self.cookies.set(self.config.key, external_key, options)
            if self._logger:
                self._logger.debug("Session saved to store: %s", external_key[:8] + "...")
            return

        token = self.config.encode(data)
        self.cookies.set(self.config.key, token, options)
        if self._logger:
            self._logger.debug("Session saved to cookie %s", self.config.key)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
