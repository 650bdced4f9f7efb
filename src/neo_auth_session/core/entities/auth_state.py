"""Canonical authentication state."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import AuthErrorCode
from .user import User


class AuthStatus(str, Enum):
    """Lifecycle phase of the authentication state machine."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    AUTHENTICATING = "authenticating"
    REGISTERING = "registering"
    AUTHENTICATED = "authenticated"
    SIGNING_OUT = "signing_out"
    UNAUTHENTICATED = "unauthenticated"

    @property
    def is_transient(self) -> bool:
        return self in _TRANSIENT


_TRANSIENT = frozenset({
    AuthStatus.UNINITIALIZED,
    AuthStatus.INITIALIZING,
    AuthStatus.AUTHENTICATING,
    AuthStatus.REGISTERING,
    AuthStatus.SIGNING_OUT,
})


@dataclass(frozen=True)
class AuthState:
    """Immutable authentication state value.

    ``is_authenticated`` always equals ``user is not None``. While a
    transient phase is running ``is_loading`` is true and ``user`` keeps the
    previously settled value, so observers never see a half-updated state.
    """

    status: AuthStatus = AuthStatus.UNINITIALIZED
    user: Optional[User] = None
    is_loading: bool = True
    is_authenticated: bool = False
    error: Optional[str] = None
    error_code: Optional[AuthErrorCode] = None

    def __post_init__(self) -> None:
        """Validate state consistency."""
        if self.is_authenticated != (self.user is not None):
            raise ValueError("is_authenticated must match presence of user")

        if self.user is not None and not self.user.is_active:
            raise ValueError("Inactive user cannot be authenticated")

        if self.is_loading != self.status.is_transient:
            raise ValueError(f"is_loading does not match status {self.status.value}")

        if self.status is AuthStatus.AUTHENTICATED and self.user is None:
            raise ValueError("Authenticated state requires a user")

        if self.status is AuthStatus.UNAUTHENTICATED and self.user is not None:
            raise ValueError("Unauthenticated state cannot carry a user")

    @classmethod
    def authenticated(cls, user: User) -> "AuthState":
        return cls(
            status=AuthStatus.AUTHENTICATED,
            user=user,
            is_loading=False,
            is_authenticated=True,
        )

    @classmethod
    def unauthenticated(cls, error_code: Optional[AuthErrorCode] = None) -> "AuthState":
        """Settled signed-out state, optionally carrying a visible error."""
        if error_code is not None and error_code.is_silent:
            error_code = None
        return cls(
            status=AuthStatus.UNAUTHENTICATED,
            user=None,
            is_loading=False,
            is_authenticated=False,
            error=error_code.message if error_code else None,
            error_code=error_code,
        )

    def begin(self, status: AuthStatus) -> "AuthState":
        """Enter a transient phase keeping the previous user fields."""
        if not status.is_transient:
            raise ValueError(f"{status.value} is not a transient status")
        return replace(self, status=status, is_loading=True, error=None, error_code=None)

    def with_user(self, user: User) -> "AuthState":
        """Same phase with a refreshed user (profile edits)."""
        return replace(self, user=user)

    @property
    def is_settled(self) -> bool:
        return not self.is_loading

    def snapshot(self) -> "AuthState":
        """Copy whose user cannot alias the machine's internal user."""
        return replace(self, user=self.user.snapshot() if self.user else None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "user": self.user.to_record() if self.user else None,
            "is_loading": self.is_loading,
            "is_authenticated": self.is_authenticated,
            "error": self.error,
            "error_code": self.error_code.value if self.error_code else None,
        }
