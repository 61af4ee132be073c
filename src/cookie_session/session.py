"""The per-request session object.

A :class:`Session` is a mutable mapping of user data plus a separate
metadata record. Bookkeeping never mixes with user keys: only
:meth:`Session.to_json` output is persisted, and the context adds the
expiry fields on save.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .constants import (
    EXPIRE_FIELD,
    MAX_AGE_FIELD,
    RESERVED_PREFIX,
    SESSION_LIFETIME,
    SESSION_LIFETIME_FIELD,
)

if TYPE_CHECKING:
    from .manager import CommitResult, SessionContext


@dataclass
class SessionMetadata:
    """Bookkeeping for one session, never serialized as user data."""

    is_new: bool = False
    expire: int | float | None = None
    require_save: bool = False
    regenerate: bool = False
    external_key: str | None = None


class Session(MutableMapping[str, Any]):
    """Request-scoped session data.

    Usage:
        session = get_session(request)
        session["views"] = session.get("views", 0) + 1
        session.max_age = 3_600_000  # forces a save
    """

    def __init__(
        self,
        context: SessionContext,
        data: Mapping[str, Any] | None = None,
        external_key: str | None = None,
    ) -> None:
        self._context = context
        self._data: dict[str, Any] = {}
        self.meta = SessionMetadata(external_key=external_key)

        if data is None:
            self.meta.is_new = True
            return

        for key, value in data.items():
            if key == MAX_AGE_FIELD:
                # Keep the lifetime the session was created with
                context.max_age = value
            elif key == SESSION_LIFETIME_FIELD:
                context.max_age = SESSION_LIFETIME
            elif key == EXPIRE_FIELD:
                self.meta.expire = value
            else:
                self._data[key] = value

    def to_json(self) -> dict[str, Any]:
        """User-visible data: no reserved keys, no callables."""
        return {
            key: value
            for key, value in self._data.items()
            if not key.startswith(RESERVED_PREFIX) and not callable(value)
        }

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_json())

    def __len__(self) -> int:
        return len(self.to_json())

    def __repr__(self) -> str:
        return repr(self.to_json())

    @property
    def length(self) -> int:
        return len(self)

    @property
    def populated(self) -> bool:
        return len(self) > 0

    @property
    def is_new(self) -> bool:
        return self.meta.is_new

    @property
    def external_key(self) -> str | None:
        """Key of the store entry; only set when an external store is configured."""
        return self.meta.external_key

    @property
    def max_age(self) -> int | float | str | None:
        return self._context.max_age

    @max_age.setter
    def max_age(self, value: int | float | str | None) -> None:
        self._context.max_age = value
        # The expiry changed, so the session must be written even if the data did not
        self.meta.require_save = True

    def save(self) -> None:
        """Persist this session on commit even if it is unpopulated or unchanged."""
        self.meta.require_save = True

    def regenerate(self) -> None:
        """Drop the persisted session on commit and save the data under a new identity."""
        self.meta.regenerate = True

    async def commit(self, save: bool = False, regenerate: bool = False) -> CommitResult:
        """Commit now instead of waiting for the middleware."""
        return await self._context.commit(save=save, regenerate=regenerate)

    async def manually_commit(self) -> CommitResult:
        """Commit the session headers when ``auto_commit`` is disabled."""
        return await self._context.commit()
