"""Account management protocol contracts."""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from ..value_objects import AccountResult, ProfileUpdateResult


@runtime_checkable
class AccountService(Protocol):
    """Protocol for registration, profile, password and password-reset operations."""

    async def update_profile(self, user_id: str, changes: Dict[str, Any]) -> ProfileUpdateResult:
        """Persist profile changes on the backend.

        Args:
            user_id: Authenticated user identifier
            changes: Requested field changes

        Returns:
            Accepted fields, or a refusal reason
        """
        ...

    async def change_password(
        self,
        user_id: str,
        email: str,
        current_password: str,
        new_password: str,
    ) -> AccountResult:
        """Change the user's password after checking the current one.

        Returns:
            Success, or refusal with reason ``invalid_credentials`` when the
            current password does not match
        """
        ...

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
        hotel_name: Optional[str],
        role: str,
    ) -> AccountResult:
        """Create a new account. The caller is not signed in by this call.

        Returns:
            Success, or refusal with reason ``email_in_use`` when the email
            already has an account
        """
        ...

    async def request_password_reset(self, email: str) -> AccountResult:
        """Ask the backend to send a password reset link."""
        ...


@runtime_checkable
class RemoteSessionTerminator(Protocol):
    """Protocol for ending the server side of a session on sign-out."""

    async def end_session(self, user_id: str) -> None:
        """Terminate remote session state for ``user_id``."""
        ...
