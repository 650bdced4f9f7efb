"""Authentication error taxonomy.

Collaborator failures are converted into an AuthErrorCode at the state
machine boundary. Each code has one exception class; adapters raise them
directly and callers that prefer exceptions to result values get one from
``AuthFailure.for_code`` or ``OperationResult.raise_for_error``.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type

from .base import AuthSessionError


class AuthErrorCode(str, Enum):
    """Closed set of failure codes surfaced by the session manager."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE_ACCOUNT = "inactive_account"
    NETWORK_ERROR = "network_error"
    MALFORMED_PERSISTED_SESSION = "malformed_persisted_session"
    STALE_SESSION = "stale_session"
    NOT_AUTHENTICATED = "not_authenticated"
    PERSISTENCE_ERROR = "persistence_error"
    EMAIL_IN_USE = "email_in_use"

    @property
    def message(self) -> str:
        """Human-readable message for this code."""
        return _MESSAGES[self]

    @property
    def is_silent(self) -> bool:
        """Routine session expiry codes that are never shown to the user."""
        return self in (
            AuthErrorCode.MALFORMED_PERSISTED_SESSION,
            AuthErrorCode.STALE_SESSION,
        )

    @classmethod
    def from_reason(cls, reason: Optional[str]) -> "AuthErrorCode":
        """Map a collaborator failure reason onto a taxonomy code.

        Unknown or missing reasons are treated as a misbehaving backend.
        """
        return _REASONS.get((reason or "").lower(), cls.NETWORK_ERROR)


_MESSAGES: Dict[AuthErrorCode, str] = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorCode.INACTIVE_ACCOUNT: "This account has been deactivated",
    AuthErrorCode.NETWORK_ERROR: "Authentication service is temporarily unavailable",
    AuthErrorCode.MALFORMED_PERSISTED_SESSION: "Stored session is unreadable",
    AuthErrorCode.STALE_SESSION: "Session is no longer valid",
    AuthErrorCode.NOT_AUTHENTICATED: "User is not authenticated",
    AuthErrorCode.PERSISTENCE_ERROR: "Unable to store the session on this device",
    AuthErrorCode.EMAIL_IN_USE: "An account with this email already exists",
}

_REASONS: Dict[str, AuthErrorCode] = {
    "invalid_credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "inactive_account": AuthErrorCode.INACTIVE_ACCOUNT,
    "unreachable": AuthErrorCode.NETWORK_ERROR,
    "email_in_use": AuthErrorCode.EMAIL_IN_USE,
}


class AuthFailure(AuthSessionError):
    """Base class for exceptions that belong to the error taxonomy."""

    code: ClassVar[AuthErrorCode]
    _by_code: ClassVar[Dict[AuthErrorCode, Type["AuthFailure"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        AuthFailure._by_code[cls.code] = cls

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message or self.code.message,
            error_code=self.code.value,
            details=details,
        )

    @classmethod
    def for_code(
        cls,
        code: AuthErrorCode,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> "AuthFailure":
        """Exception instance matching ``code``."""
        return cls._by_code[AuthErrorCode(code)](message, details=details)


class InvalidCredentials(AuthFailure):
    """Identifier/secret pair was rejected."""

    code = AuthErrorCode.INVALID_CREDENTIALS


class InactiveAccount(AuthFailure):
    """Account exists but has been deactivated."""

    code = AuthErrorCode.INACTIVE_ACCOUNT


class NetworkError(AuthFailure):
    """Credential backend could not be reached or answered garbage."""

    code = AuthErrorCode.NETWORK_ERROR


class MalformedPersistedSession(AuthFailure):
    """Stored session record failed to parse or validate."""

    code = AuthErrorCode.MALFORMED_PERSISTED_SESSION


class StaleSession(AuthFailure):
    """Revalidation rejected a previously trusted identity."""

    code = AuthErrorCode.STALE_SESSION


class NotAuthenticated(AuthFailure):
    """Profile-mutating call made outside the Authenticated state."""

    code = AuthErrorCode.NOT_AUTHENTICATED


class PersistenceError(AuthFailure):
    """Session storage backend failed to read, write or clear."""

    code = AuthErrorCode.PERSISTENCE_ERROR


class EmailInUse(AuthFailure):
    """Registration refused because the email already has an account."""

    code = AuthErrorCode.EMAIL_IN_USE
