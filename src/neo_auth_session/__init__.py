"""Client-side authentication session manager.

Tracks whether the current user is signed in, persists the session across
restarts, revalidates it against the identity backend and notifies
subscribers of every state change.
"""

from .__version__ import __version__
from .application import (
    AuthStateMachine,
    LoggingAuthObserver,
    NullAuthObserver,
    SessionRecordCodec,
    SubscriberRegistry,
    Subscription,
)
from .config import AuthSessionSettings, StorageBackend, get_settings, setup_logging
from .core.entities import AuthState, AuthStatus, User, UserRole
from .core.exceptions import (
    AuthConfigurationError,
    AuthErrorCode,
    AuthFailure,
    AuthSessionError,
    EmailInUse,
    InactiveAccount,
    InvalidCredentials,
    MalformedPersistedSession,
    NetworkError,
    NotAuthenticated,
    PersistenceError,
    StaleSession,
)
from .core.value_objects import (
    AccountResult,
    OperationResult,
    ProfileUpdateResult,
    RevalidationResult,
    SignInResult,
    VerificationResult,
)
from .infrastructure import (
    EncryptedPersistence,
    FilePersistence,
    HttpAuthBackend,
    MemoryPersistence,
    PersistenceFactory,
    RedisPersistence,
)
from .module import AuthSessionModule, create_auth_session

__all__ = [
    "__version__",
    # State machine
    "AuthStateMachine",
    "SubscriberRegistry",
    "Subscription",
    "SessionRecordCodec",
    "LoggingAuthObserver",
    "NullAuthObserver",
    # Entities
    "AuthState",
    "AuthStatus",
    "User",
    "UserRole",
    # Errors
    "AuthErrorCode",
    "AuthSessionError",
    "AuthConfigurationError",
    "AuthFailure",
    "InvalidCredentials",
    "InactiveAccount",
    "NetworkError",
    "MalformedPersistedSession",
    "StaleSession",
    "NotAuthenticated",
    "PersistenceError",
    "EmailInUse",
    # Results
    "VerificationResult",
    "RevalidationResult",
    "AccountResult",
    "ProfileUpdateResult",
    "OperationResult",
    "SignInResult",
    # Infrastructure
    "MemoryPersistence",
    "FilePersistence",
    "EncryptedPersistence",
    "RedisPersistence",
    "HttpAuthBackend",
    "PersistenceFactory",
    # Configuration
    "AuthSessionSettings",
    "StorageBackend",
    "get_settings",
    "setup_logging",
    # Composition
    "AuthSessionModule",
    "create_auth_session",
]
