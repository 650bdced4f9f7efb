"""Credential verification protocol contract."""

from typing import Protocol, runtime_checkable

from ..value_objects import VerificationResult


@runtime_checkable
class CredentialVerifier(Protocol):
    """Protocol for checking an identifier/secret pair against the identity backend."""

    async def verify(self, identifier: str, secret: str) -> VerificationResult:
        """Verify credentials.

        Args:
            identifier: Lower-cased login identifier (email)
            secret: Password as typed by the user

        Returns:
            Verified identity record, or a failure reason

        Raises:
            NetworkError: If the backend is unreachable (any exception is
                treated the same way by the state machine)
        """
        ...
