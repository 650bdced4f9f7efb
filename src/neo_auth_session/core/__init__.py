"""Core authentication session domain objects.

Components:
- entities: User and AuthState
- value_objects: results exchanged with collaborators and callers
- exceptions: error taxonomy
- protocols: collaborator contracts
"""

from .entities import User, UserRole, AuthState, AuthStatus, UPDATABLE_FIELDS
from .exceptions import (
    AuthSessionError,
    AuthConfigurationError,
    AuthErrorCode,
    AuthFailure,
    InvalidCredentials,
    InactiveAccount,
    NetworkError,
    MalformedPersistedSession,
    StaleSession,
    NotAuthenticated,
    PersistenceError,
)
from .value_objects import (
    VerificationResult,
    RevalidationResult,
    AccountResult,
    ProfileUpdateResult,
    OperationResult,
    SignInResult,
)
from .protocols import (
    PersistencePort,
    CredentialVerifier,
    SessionRevalidator,
    AccountService,
    RemoteSessionTerminator,
    AuthObserver,
)

__all__ = [
    # Entities
    "User",
    "UserRole",
    "AuthState",
    "AuthStatus",
    "UPDATABLE_FIELDS",

    # Exceptions
    "AuthSessionError",
    "AuthConfigurationError",
    "AuthErrorCode",
    "AuthFailure",
    "InvalidCredentials",
    "InactiveAccount",
    "NetworkError",
    "MalformedPersistedSession",
    "StaleSession",
    "NotAuthenticated",
    "PersistenceError",

    # Value Objects
    "VerificationResult",
    "RevalidationResult",
    "AccountResult",
    "ProfileUpdateResult",
    "OperationResult",
    "SignInResult",

    # Protocols
    "PersistencePort",
    "CredentialVerifier",
    "SessionRevalidator",
    "AccountService",
    "RemoteSessionTerminator",
    "AuthObserver",
]
