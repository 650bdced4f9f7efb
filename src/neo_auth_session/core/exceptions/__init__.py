"""Authentication session exceptions."""

from .base import AuthSessionError, AuthConfigurationError
from .auth import (
    AuthErrorCode,
    AuthFailure,
    InvalidCredentials,
    InactiveAccount,
    NetworkError,
    MalformedPersistedSession,
    StaleSession,
    NotAuthenticated,
    PersistenceError,
    EmailInUse,
)

__all__ = [
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
    "EmailInUse",
]
