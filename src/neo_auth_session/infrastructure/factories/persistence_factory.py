"""Persistence factory for building the configured session store."""

import logging
from pathlib import Path

from ...config.settings import AuthSessionSettings, StorageBackend
from ...core.exceptions import AuthConfigurationError
from ...core.protocols import PersistencePort
from ..persistence import (
    EncryptedPersistence,
    FilePersistence,
    MemoryPersistence,
    RedisPersistence,
)

logger = logging.getLogger(__name__)


class PersistenceFactory:
    """Factory for the session persistence port.

    Handles ONLY persistence construction:
    - Backend selection from settings
    - Encryption-at-rest wrapping when a key is configured
    - Configuration validation

    Does NOT handle session state or revalidation.
    """

    def __init__(self, settings: AuthSessionSettings):
        """Initialize persistence factory.

        Args:
            settings: Authentication session settings

        Raises:
            AuthConfigurationError: If the settings cannot produce a store
        """
        self.settings = settings
        self._validate_config()

    def _validate_config(self) -> None:
        backend = self.settings.storage_backend

        if backend == StorageBackend.FILE and not self.settings.storage_path:
            raise AuthConfigurationError(
                "storage_path is required for the file backend",
                details={"storage_backend": backend.value},
            )

        if backend == StorageBackend.REDIS and not self.settings.redis_url:
            raise AuthConfigurationError(
                "redis_url is required for the redis backend",
                details={"storage_backend": backend.value},
            )

        logger.debug(f"Persistence factory configured: backend={backend.value}")

    def create(self) -> PersistencePort:
        """Create the configured persistence port.

        Returns:
            Persistence port, wrapped with encryption when enabled
        """
        store = self._create_backend()

        if self.settings.encrypt_at_rest:
            store = EncryptedPersistence(
                store,
                self.settings.encryption_key.get_secret_value(),
                salt=self.settings.encryption_salt.encode("utf-8"),
            )
            logger.debug("Session persistence encrypted at rest")

        return store

    def _create_backend(self) -> PersistencePort:
        backend = self.settings.storage_backend
        storage_key = self.settings.storage_key

        if backend == StorageBackend.MEMORY:
            logger.debug("Creating in-memory session persistence")
            return MemoryPersistence()

        if backend == StorageBackend.FILE:
            directory = Path(self.settings.storage_path).expanduser()
            logger.debug(f"Creating file session persistence in {directory}")
            return FilePersistence(directory, storage_key=storage_key)

        if backend == StorageBackend.REDIS:
            logger.debug("Creating Redis session persistence")
            return RedisPersistence.from_url(
                self.settings.redis_url,
                storage_key=storage_key,
                key_prefix=self.settings.redis_key_prefix,
                ttl_seconds=self.settings.session_ttl_seconds,
            )

        raise AuthConfigurationError(
            f"Unsupported storage backend: {backend}",
            details={"storage_backend": str(backend)},
        )
