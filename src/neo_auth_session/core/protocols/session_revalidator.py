"""Session revalidation protocol contract."""

from typing import Protocol, runtime_checkable

from ..value_objects import RevalidationResult


@runtime_checkable
class SessionRevalidator(Protocol):
    """Protocol for confirming a previously trusted identity is still valid."""

    async def revalidate(self, user_id: str) -> RevalidationResult:
        """Confirm the user still exists and is active.

        Args:
            user_id: Identifier from the stored session

        Returns:
            Fresh identity snapshot, or a rejection

        Raises:
            NetworkError: If the backend is unreachable
        """
        ...
