"""Authentication session domain entities."""

from .user import (
    User,
    UserRole,
    LEGACY_ROLE_ALIASES,
    UPDATABLE_FIELDS,
    DEFAULT_TIMEZONE,
    DEFAULT_LANGUAGE,
)
from .auth_state import AuthState, AuthStatus

__all__ = [
    "User",
    "UserRole",
    "LEGACY_ROLE_ALIASES",
    "UPDATABLE_FIELDS",
    "DEFAULT_TIMEZONE",
    "DEFAULT_LANGUAGE",
    "AuthState",
    "AuthStatus",
]
