"""Configuration for neo-auth-session."""

from .settings import AuthSessionSettings, StorageBackend, get_settings
from .logging_config import LoggingConfig, LogLevel, LogVerbosity, LogFormat, setup_logging, get_logger

__all__ = [
    "AuthSessionSettings",
    "StorageBackend",
    "get_settings",
    "LoggingConfig",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "setup_logging",
    "get_logger",
]
