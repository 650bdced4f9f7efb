"""Authenticated user entity."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_LANGUAGE = "pt-BR"


class UserRole(str, Enum):
    """Closed set of roles a session user can hold."""

    MASTER_ADMIN = "master_admin"
    HOTEL_OWNER = "hotel_owner"
    HOTEL_STAFF = "hotel_staff"

    @classmethod
    def parse(cls, value: Any) -> "UserRole":
        """Resolve a role name, accepting legacy aliases.

        Raises:
            ValueError: If the role is unknown
        """
        if isinstance(value, str):
            value = LEGACY_ROLE_ALIASES.get(value.lower(), value.lower())
        return cls(value)


# Older backends stored hotel owners as "client".
LEGACY_ROLE_ALIASES: Dict[str, UserRole] = {
    "client": UserRole.HOTEL_OWNER,
}

UPDATABLE_FIELDS: FrozenSet[str] = frozenset({
    "full_name",
    "phone",
    "avatar_url",
    "timezone",
    "language",
    "preferences",
    "hotel_name",
})


class User(BaseModel):
    """Authenticated identity as known to the session manager.

    Instances are frozen; every change goes through ``with_changes`` which
    re-validates the merged record. ``email`` is always stored lower-cased so
    identity comparison is case-insensitive.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "user_id"))
    email: str
    full_name: str = ""
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole = Field(validation_alias=AliasChoices("role", "user_role"))
    is_active: bool = True
    timezone: str = DEFAULT_TIMEZONE
    language: str = DEFAULT_LANGUAGE
    preferences: Dict[str, Any] = Field(default_factory=dict)
    hotel_id: Optional[str] = None
    hotel_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if isinstance(value, (int, UUID)):
            value = str(value)
        if not isinstance(value, str) or not value:
            raise ValueError("User id must be a non-empty string")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("User email must be a non-empty string")
        return value.lower()

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.lower()
            return LEGACY_ROLE_ALIASES.get(value, value)
        return value

    @field_validator("timezone", mode="before")
    @classmethod
    def _default_timezone(cls, value: Any) -> Any:
        return value or DEFAULT_TIMEZONE

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, value: Any) -> Any:
        return value or DEFAULT_LANGUAGE

    @field_validator("preferences", mode="before")
    @classmethod
    def _default_preferences(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("hotel_id", mode="before")
    @classmethod
    def _coerce_hotel_id(cls, value: Any) -> Any:
        if isinstance(value, (int, UUID)):
            return str(value)
        return value

    @classmethod
    def from_identity(
        cls,
        identity: Mapping[str, Any],
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
        default_language: str = DEFAULT_LANGUAGE,
        fallback_email: Optional[str] = None,
    ) -> "User":
        """Build a user from a collaborator identity record.

        Args:
            identity: Raw identity mapping returned by a verifier/revalidator
            default_timezone: Timezone used when the record has none
            default_language: Language used when the record has none
            fallback_email: Email used when the record omits it

        Returns:
            Validated user

        Raises:
            ValueError: If the record cannot be turned into a valid user
        """
        if not isinstance(identity, Mapping):
            raise ValueError("Identity record must be a mapping")

        data = dict(identity)
        if not data.get("timezone"):
            data["timezone"] = default_timezone
        if not data.get("language"):
            data["language"] = default_language
        if not data.get("email") and fallback_email:
            data["email"] = fallback_email
        return cls.model_validate(data)

    def with_changes(self, changes: Mapping[str, Any]) -> "User":
        """Return a validated copy with ``changes`` merged in."""
        return type(self).model_validate({**self.model_dump(), **dict(changes)})

    def has_role(self, *roles: Any) -> bool:
        """Check whether the user holds any of ``roles``."""
        return self.role in {UserRole.parse(role) for role in roles}

    def snapshot(self) -> "User":
        """Deep copy safe to hand out to callers."""
        return self.model_copy(deep=True)

    def to_record(self) -> Dict[str, Any]:
        """JSON-compatible dictionary representation."""
        return self.model_dump(mode="json")

    def __str__(self) -> str:
        return f"User({self.id}, role={self.role.value})"
