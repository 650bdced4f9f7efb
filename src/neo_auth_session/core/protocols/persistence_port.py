"""Session persistence protocol contract."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class PersistencePort(Protocol):
    """Protocol for durable storage of exactly one serialized session record.

    Implementations own a single fixed namespace key and only ever perform
    whole-record writes. The state machine is the only writer.
    """

    async def get(self) -> Optional[str]:
        """Read the stored session record.

        Returns:
            Serialized record, or None if nothing is stored

        Raises:
            MalformedPersistedSession: If the stored bytes cannot be decoded
            PersistenceError: If the storage backend fails
        """
        ...

    async def set(self, record: str) -> None:
        """Replace the stored session record.

        Args:
            record: Complete serialized record

        Raises:
            PersistenceError: If the storage backend fails
        """
        ...

    async def clear(self) -> None:
        """Remove the stored session record. Clearing an empty store is a no-op.

        Raises:
            PersistenceError: If the storage backend fails
        """
        ...
