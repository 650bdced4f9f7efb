"""Observer protocol for state machine diagnostics."""

from typing import Any, Optional, Protocol, runtime_checkable

from ..entities import AuthState
from ..exceptions import AuthErrorCode


@runtime_checkable
class AuthObserver(Protocol):
    """Receives diagnostics from the state machine instead of inline logging."""

    def on_transition(self, previous: AuthState, current: AuthState) -> None:
        """Called after every state mutation, before subscribers are notified."""
        ...

    def on_failure(
        self,
        operation: str,
        code: AuthErrorCode,
        error: Optional[BaseException] = None,
    ) -> None:
        """Called when an operation converts a failure into a taxonomy code."""
        ...

    def on_listener_error(self, listener: Any, error: Exception) -> None:
        """Called when a subscriber raised during notification."""
        ...
