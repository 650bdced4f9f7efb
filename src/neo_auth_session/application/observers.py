"""State machine observers."""

import logging
from typing import Any, Optional

from ..core.entities import AuthState
from ..core.exceptions import AuthErrorCode

logger = logging.getLogger(__name__)


def mask_identifier(value: Optional[str]) -> str:
    """Mask an email or id for logs, keeping the first and last two characters."""
    if not value or len(value) <= 4:
        return "***"
    return f"{value[:2]}...{value[-2:]}"


class NullAuthObserver:
    """Observer that ignores everything."""

    def on_transition(self, previous: AuthState, current: AuthState) -> None:
        pass

    def on_failure(
        self,
        operation: str,
        code: AuthErrorCode,
        error: Optional[BaseException] = None,
    ) -> None:
        pass

    def on_listener_error(self, listener: Any, error: Exception) -> None:
        pass


class LoggingAuthObserver:
    """Observer that reports state machine activity through ``logging``.

    User identifiers are masked. Silent codes (routine session expiry) are
    logged at INFO, surfaced failures at WARNING, and subscriber crashes
    with a traceback at ERROR.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self._logger = log or logger

    def on_transition(self, previous: AuthState, current: AuthState) -> None:
        if previous.status is current.status and previous.user == current.user:
            return
        user_id = current.user.id if current.user else None
        self._logger.debug(
            "Auth state %s -> %s (user=%s)",
            previous.status.value,
            current.status.value,
            mask_identifier(user_id) if user_id else None,
        )

    def on_failure(
        self,
        operation: str,
        code: AuthErrorCode,
        error: Optional[BaseException] = None,
    ) -> None:
        level = logging.INFO if code.is_silent else logging.WARNING
        if error is not None:
            self._logger.log(level, "%s failed: %s (%s: %s)", operation, code.value, type(error).__name__, error)
        else:
            self._logger.log(level, "%s failed: %s", operation, code.value)

    def on_listener_error(self, listener: Any, error: Exception) -> None:
        name = getattr(listener, "__qualname__", None) or repr(listener)
        self._logger.error("Auth state listener %s raised", name, exc_info=error)
