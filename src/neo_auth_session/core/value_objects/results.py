"""Result values exchanged with collaborators and returned to callers."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..entities import User
from ..exceptions import AuthErrorCode, AuthFailure


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a credential verification.

    ``reason`` is one of ``invalid_credentials``, ``inactive_account`` or
    ``unreachable`` when ``success`` is false.
    """

    success: bool
    identity: Optional[Mapping[str, Any]] = None
    reason: Optional[str] = None

    @classmethod
    def verified(cls, identity: Mapping[str, Any]) -> "VerificationResult":
        return cls(success=True, identity=identity)

    @classmethod
    def rejected(cls, reason: str) -> "VerificationResult":
        return cls(success=False, reason=reason)


@dataclass(frozen=True)
class RevalidationResult:
    """Outcome of confirming a previously trusted identity."""

    valid: bool
    identity: Optional[Mapping[str, Any]] = None

    @classmethod
    def confirmed(cls, identity: Mapping[str, Any]) -> "RevalidationResult":
        return cls(valid=True, identity=identity)

    @classmethod
    def revoked(cls) -> "RevalidationResult":
        return cls(valid=False)


@dataclass(frozen=True)
class AccountResult:
    """Outcome of an account service call."""

    success: bool
    reason: Optional[str] = None

    @classmethod
    def done(cls) -> "AccountResult":
        return cls(success=True)

    @classmethod
    def refused(cls, reason: str) -> "AccountResult":
        return cls(success=False, reason=reason)


@dataclass(frozen=True)
class ProfileUpdateResult(AccountResult):
    """Profile update outcome; ``accepted`` holds the fields the backend stored."""

    accepted: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class OperationResult:
    """Result returned by state machine operations."""

    success: bool
    error: Optional[str] = None
    error_code: Optional[AuthErrorCode] = None

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(success=True)

    @classmethod
    def failed(cls, code: AuthErrorCode, message: Optional[str] = None) -> "OperationResult":
        return cls(success=False, error=message or code.message, error_code=code)

    def raise_for_error(self) -> None:
        """Raise the matching ``AuthFailure`` when the operation failed."""
        if not self.success:
            raise AuthFailure.for_code(
                self.error_code or AuthErrorCode.NETWORK_ERROR, self.error
            )


@dataclass(frozen=True)
class SignInResult(OperationResult):
    """Sign-in result carrying a snapshot of the signed-in user."""

    user: Optional[User] = None

    @classmethod
    def signed_in(cls, user: User) -> "SignInResult":
        return cls(success=True, user=user)
