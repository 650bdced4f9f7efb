"""Persistence port implementations."""

from .memory_persistence import MemoryPersistence
from .file_persistence import FilePersistence
from .encrypted_persistence import EncryptedPersistence
from .redis_persistence import RedisPersistence

__all__ = [
    "MemoryPersistence",
    "FilePersistence",
    "EncryptedPersistence",
    "RedisPersistence",
]
