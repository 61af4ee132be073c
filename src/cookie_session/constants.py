"""Constants for cookie session management.

Field names and defaults match koa-session's wire format, so sessions
written by a Node.js service can be read here and the other way round.
"""

from __future__ import annotations

import re
from typing import Final

# Default cookie name (koa-session compatible)
DEFAULT_COOKIE_KEY: Final[str] = "koa.sess"

# Default session lifetime in milliseconds (24 hours)
ONE_DAY_MS: Final[int] = 24 * 60 * 60 * 1000

# max_age sentinel: expire together with the browser session
SESSION_LIFETIME: Final[str] = "session"

# Store entries outlive the cookie by this many milliseconds
STORE_TTL_BUFFER_MS: Final[int] = 10_000

# Expiry date used to clear a cookie
COOKIE_EXPIRED_DATE: Final[str] = "Thu, 01 Jan 1970 00:00:00 GMT"

# Keys starting with this prefix are bookkeeping, never user data
RESERVED_PREFIX: Final[str] = "_"

# Bookkeeping fields carried in the persisted payload
EXPIRE_FIELD: Final[str] = "_expire"
MAX_AGE_FIELD: Final[str] = "_maxAge"
SESSION_LIFETIME_FIELD: Final[str] = "_session"

# Suffix of the companion cookie holding a signature
SIGNATURE_SUFFIX: Final[str] = ".sig"

# Salt for cookie signatures, keeps them distinct from other itsdangerous users
SIGNER_SALT: Final[str] = "cookie-session.sign"

# Redis key prefix for externally stored sessions
REDIS_KEY_PREFIX: Final[str] = "koa:sess:"

# External keys: printable ASCII, bounded length
EXTERNAL_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[\x20-\x7e]{1,256}$")

SAME_SITE_VALUES: Final[frozenset[str]] = frozenset({"lax", "strict", "none"})

# Observable event names
SESSION_MISSED: Final[str] = "session:missed"
SESSION_EXPIRED: Final[str] = "session:expired"
SESSION_INVALID: Final[str] = "session:invalid"
