"""Settings for the authentication session manager.

Values come from ``AUTH_SESSION_*`` environment variables or a ``.env`` file.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.entities import DEFAULT_LANGUAGE, DEFAULT_TIMEZONE


class StorageBackend(str, Enum):
    """Supported persistence backends."""
    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


class AuthSessionSettings(BaseSettings):
    """Authentication session settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence
    storage_backend: StorageBackend = Field(default=StorageBackend.FILE)
    storage_key: str = Field(default="neo_auth_session_user")
    storage_path: str = Field(default="~/.neo_auth_session")
    redis_url: Optional[str] = Field(default=None)
    redis_key_prefix: str = Field(default="auth_session")
    session_ttl_seconds: Optional[int] = Field(default=None, gt=0)

    # Encryption at rest, enabled when a key is present
    encryption_key: Optional[SecretStr] = Field(default=None)
    encryption_salt: str = Field(default="neo-auth-session")

    # Identity backend
    backend_url: Optional[str] = Field(default=None)
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Locale defaults for users whose record has none
    default_timezone: str = Field(default=DEFAULT_TIMEZONE)
    default_language: str = Field(default=DEFAULT_LANGUAGE)

    @field_validator("storage_key")
    @classmethod
    def _validate_storage_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("storage_key must be a non-empty string")
        return value

    @field_validator("backend_url")
    @classmethod
    def _validate_backend_url(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError(f"Invalid backend_url format: {value}")
        return value

    @property
    def encrypt_at_rest(self) -> bool:
        return self.encryption_key is not None and bool(self.encryption_key.get_secret_value())


@lru_cache()
def get_settings() -> AuthSessionSettings:
    """Cached settings instance."""
    return AuthSessionSettings()
