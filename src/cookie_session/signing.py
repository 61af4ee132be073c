"""Cookie signatures.

Signed cookies travel with a companion ``<name>.sig`` cookie holding an
HMAC of ``<name>=<value>``, the layout koa's cookie library uses. Keys
rotate: signatures are always made with the newest key and verified
against all of them.
"""

from __future__ import annotations

from collections.abc import Sequence

from itsdangerous import Signer

from .constants import SIGNATURE_SUFFIX, SIGNER_SALT


class CookieSigner:
    """Sign and verify cookie values with a rotating key list.

    Usage:
        signer = CookieSigner(["old-secret", "new-secret"])
        sig = signer.sign("koa.sess", "eyJ...")
        signer.verify("koa.sess", "eyJ...", sig)  # True
    """

    def __init__(
        self,
        secret_keys: str | bytes | Sequence[str | bytes],
        salt: str = SIGNER_SALT,
    ) -> None:
        """Initialize the signer.

        Args:
            secret_keys: One key, or a list ordered oldest to newest.
            salt: Namespace for the signatures.

        Raises:
            ValueError: If no key is given.
        """
        if isinstance(secret_keys, (str, bytes)):
            secret_keys = [secret_keys]
        keys = list(secret_keys)
        if not keys or not all(keys):
            raise ValueError("secret_keys cannot be empty")
        self._signer = Signer(keys, salt=salt)

    @staticmethod
    def signature_name(name: str) -> str:
        return f"{name}{SIGNATURE_SUFFIX}"

    def sign(self, name: str, value: str) -> str:
        return self._signer.get_signature(f"{name}={value}").decode("ascii")

    def verify(self, name: str, value: str, signature: str | None) -> bool:
        if not signature:
            return False
        return self._signer.verify_signature(f"{name}={value}", signature)
