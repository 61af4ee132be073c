"""External key sanitization and validation.

External keys arrive from client cookies and are used to build store
keys, so they are validated before any store lookup. Generated keys are
held to the same rule, so every key this package issues can be read back.
"""

from __future__ import annotations

import logging

from .constants import EXTERNAL_KEY_PATTERN


def is_valid_external_key(key: str) -> bool:
    """Whether *key* survives a round trip through the session cookie."""
    return bool(key.strip()) and EXTERNAL_KEY_PATTERN.match(key) is not None


def sanitize_external_key(
    key: str | None,
    logger: logging.Logger | None = None,
) -> str | None:
    """Validate an external key read from a cookie.

    Args:
        key: Raw key from the cookie.
        logger: Optional logger for security warnings.

    Returns:
        The key unchanged, or None if invalid.

    Security considerations:
        - Limits length to prevent DoS via large cookies
        - Only allows printable ASCII, so control characters and null
          bytes never reach the store
        - Rejects empty and whitespace-only strings

    Example:
        >>> sanitize_external_key("tenant 1:3f0c2b1e-5b7a-4c6e-9d2a-8f1e7c3b9a10")
        'tenant 1:3f0c2b1e-5b7a-4c6e-9d2a-8f1e7c3b9a10'
        >>> sanitize_external_key("abc\\x00hidden")
        None
    """
    if not key:
        return None

    if not is_valid_external_key(key):
        if logger:
            logger.warning(
                "Invalid external key format rejected: prefix=%r, length=%d",
                key[:8],
                len(key),
            )
        return None

    return key
