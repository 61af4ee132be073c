"""Session payload encoding.

Session data travels as base64-encoded compact JSON, the same format
koa-session writes, so cookies are portable between implementations.
"""

from __future__ import annotations

import base64
import json
import zlib
from typing import Any

from .exceptions import SessionDecodeError


def _dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def encode(data: dict[str, Any]) -> str:
    """Encode session data into a cookie-safe string.

    Args:
        data: Session payload, JSON-serializable values only.

    Returns:
        Base64 of the compact JSON form.

    Raises:
        TypeError: If the payload holds a value JSON cannot represent.
    """
    return base64.b64encode(_dumps(data).encode("utf-8")).decode("ascii")


def decode(token: str) -> dict[str, Any]:
    """Decode a token produced by :func:`encode`.

    Args:
        token: Raw cookie value.

    Returns:
        The session payload.

    Raises:
        SessionDecodeError: If the token is not base64, not UTF-8 JSON,
            or does not hold a JSON object.

    Example:
        >>> decode(encode({"string": ";"}))
        {'string': ';'}
    """
    try:
        body = base64.b64decode(token).decode("utf-8")
        data = json.loads(body)
    except ValueError as err:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
        raise SessionDecodeError(f"Malformed session payload: {err}") from err

    if not isinstance(data, dict):
        raise SessionDecodeError(
            f"Session payload must be a JSON object, got {type(data).__name__}"
        )
    return data


def hash_data(data: dict[str, Any]) -> int:
    """CRC-32 of the compact JSON form, used for change detection only."""
    return zlib.crc32(_dumps(data).encode("utf-8"))
