"""Serialization of the persisted session record."""

import json
from typing import Any, Mapping, Optional

from ..core.entities import User, DEFAULT_LANGUAGE, DEFAULT_TIMEZONE
from ..core.exceptions import MalformedPersistedSession


class SessionRecordCodec:
    """Converts between ``User`` and the serialized session record.

    The record is the JSON form of a single user snapshot. Identity records
    coming from collaborators are normalized through the same defaults so a
    user read back from storage equals the one that was written.
    """

    def __init__(
        self,
        default_timezone: str = DEFAULT_TIMEZONE,
        default_language: str = DEFAULT_LANGUAGE,
    ):
        self.default_timezone = default_timezone
        self.default_language = default_language

    def encode(self, user: User) -> str:
        return user.model_dump_json()

    def decode(self, record: Any) -> User:
        """Parse a stored record.

        Raises:
            MalformedPersistedSession: If the record is not a valid user snapshot
        """
        if isinstance(record, bytes):
            record = record.decode("utf-8", errors="replace")

        try:
            data = json.loads(record)
            return self.build_user(data)
        except (TypeError, ValueError) as e:
            raise MalformedPersistedSession(
                details={"error": str(e), "record_type": type(record).__name__}
            ) from e

    def build_user(
        self,
        identity: Mapping[str, Any],
        fallback_email: Optional[str] = None,
    ) -> User:
        """Build a user from a collaborator identity record.

        Raises:
            ValueError: If the record is not a valid identity
        """
        return User.from_identity(
            identity,
            default_timezone=self.default_timezone,
            default_language=self.default_language,
            fallback_email=fallback_email,
        )
