"""Encryption-at-rest wrapper for session persistence."""

import base64
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ...core.exceptions import MalformedPersistedSession
from ...core.protocols import PersistencePort

DEFAULT_SALT = b"neo-auth-session"


class EncryptedPersistence:
    """Wraps another persistence port and Fernet-encrypts the record.

    The Fernet key is derived from a passphrase with PBKDF2-SHA256. A record
    that cannot be decrypted (wrong key, tampering, plain-text leftovers) is
    reported as a malformed session so the state machine clears it.
    """

    def __init__(
        self,
        inner: PersistencePort,
        encryption_key: Union[str, bytes],
        salt: bytes = DEFAULT_SALT,
        iterations: int = 100000,
    ):
        """Initialize encrypted persistence.

        Args:
            inner: Port that stores the encrypted token
            encryption_key: Passphrase the Fernet key is derived from
            salt: KDF salt
            iterations: PBKDF2 iteration count
        """
        if not encryption_key:
            raise ValueError("Encryption key is required")

        self.inner = inner
        self._cipher = self._build_cipher(encryption_key, salt, iterations)

    @staticmethod
    def _build_cipher(key: Union[str, bytes], salt: bytes, iterations: int) -> Fernet:
        key_bytes = key.encode("utf-8") if isinstance(key, str) else key
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return Fernet(base64.urlsafe_b64encode(kdf.derive(key_bytes)))

    async def get(self) -> Optional[str]:
        token = await self.inner.get()
        if token is None:
            return None
        try:
            return self._cipher.decrypt(token.encode("utf-8")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise MalformedPersistedSession(
                "Stored session could not be decrypted",
                details={"error": type(e).__name__},
            ) from e

    async def set(self, record: str) -> None:
        token = self._cipher.encrypt(record.encode("utf-8")).decode("utf-8")
        await self.inner.set(token)

    async def clear(self) -> None:
        await self.inner.clear()
