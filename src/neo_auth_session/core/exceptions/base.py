"""Base exceptions for neo-auth-session.

Every exception raised by this package inherits from AuthSessionError and
carries an error code and a details dictionary for structured logging.
"""

from typing import Any, Dict, Optional


class AuthSessionError(Exception):
    """Base exception for all neo-auth-session errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class AuthConfigurationError(AuthSessionError):
    """Raised when the session manager is wired or configured incorrectly."""
    pass
