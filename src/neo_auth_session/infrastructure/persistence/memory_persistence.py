"""In-memory session persistence."""

from typing import Dict, Optional


class MemoryPersistence:
    """Process-local session storage.

    Handles ONLY holding one record in memory. Used by tests and by
    applications that do not want sessions to survive a restart.
    """

    def __init__(self, initial_record: Optional[str] = None):
        self._record: Optional[str] = initial_record

        # Statistics
        self._reads = 0
        self._writes = 0
        self._clears = 0

    async def get(self) -> Optional[str]:
        self._reads += 1
        return self._record

    async def set(self, record: str) -> None:
        if not isinstance(record, str):
            raise TypeError("Session record must be a string")
        self._writes += 1
        self._record = record

    async def clear(self) -> None:
        self._clears += 1
        self._record = None

    @property
    def record(self) -> Optional[str]:
        """Stored record, read without counting as a port access."""
        return self._record

    def get_stats(self) -> Dict[str, int]:
        return {
            "reads": self._reads,
            "writes": self._writes,
            "clears": self._clears,
        }
