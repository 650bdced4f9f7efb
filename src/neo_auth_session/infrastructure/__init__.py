"""Authentication session infrastructure.

Storage adapters for the persistence port, the HTTP identity backend and
the factory that builds storage from settings.
"""

from .persistence import MemoryPersistence, FilePersistence, EncryptedPersistence, RedisPersistence
from .adapters import HttpAuthBackend
from .factories import PersistenceFactory

__all__ = [
    "MemoryPersistence",
    "FilePersistence",
    "EncryptedPersistence",
    "RedisPersistence",
    "HttpAuthBackend",
    "PersistenceFactory",
]
