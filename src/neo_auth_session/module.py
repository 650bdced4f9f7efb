"""Composition root for the authentication session manager.

Usage:
    from neo_auth_session import AuthSessionModule

    async with AuthSessionModule() as module:
        auth = module.state_machine
        await auth.initialize()
        result = await auth.sign_in("admin@example.com", "secret")

Settings come from ``AUTH_SESSION_*`` environment variables unless a
settings object is passed. Any collaborator can be injected to replace the
one built from settings, which is how tests run against fakes.
"""

import logging
from typing import Any, List, Optional

from .application import AuthStateMachine, LoggingAuthObserver, SessionRecordCodec
from .config import AuthSessionSettings, get_settings
from .core.exceptions import AuthConfigurationError
from .core.protocols import (
    AccountService,
    AuthObserver,
    CredentialVerifier,
    PersistencePort,
    RemoteSessionTerminator,
    SessionRevalidator,
)
from .infrastructure import HttpAuthBackend, PersistenceFactory

logger = logging.getLogger(__name__)


class AuthSessionModule:
    """Builds one ``AuthStateMachine`` and owns the resources it created.

    Resources passed in by the caller are never closed by the module; the
    HTTP client and Redis connection it creates itself are closed on
    ``shutdown()`` or when leaving the ``async with`` block.
    """

    def __init__(
        self,
        settings: Optional[AuthSessionSettings] = None,
        *,
        persistence: Optional[PersistencePort] = None,
        verifier: Optional[CredentialVerifier] = None,
        revalidator: Optional[SessionRevalidator] = None,
        account_service: Optional[AccountService] = None,
        remote_sign_out: Optional[RemoteSessionTerminator] = None,
        observer: Optional[AuthObserver] = None,
    ):
        self.name = "auth_session"
        self.settings = settings or get_settings()

        self._persistence = persistence
        self._verifier = verifier
        self._revalidator = revalidator
        self._account_service = account_service
        self._remote_sign_out = remote_sign_out
        self._observer = observer

        self._owned: List[Any] = []
        self._state_machine: Optional[AuthStateMachine] = None

    def build(self) -> AuthStateMachine:
        """Build the state machine; later calls return the same instance.

        Raises:
            AuthConfigurationError: If a required collaborator is neither
                injected nor derivable from settings
        """
        if self._state_machine is not None:
            return self._state_machine

        logger.info("Configuring auth session module")

        persistence = self._persistence
        if persistence is None:
            persistence = PersistenceFactory(self.settings).create()
            self._owned.append(persistence)

        verifier = self._verifier
        revalidator = self._revalidator
        account_service = self._account_service
        remote_sign_out = self._remote_sign_out

        if verifier is None or revalidator is None:
            backend = self._create_backend()
            verifier = verifier or backend
            revalidator = revalidator or backend
            account_service = account_service or backend
            remote_sign_out = remote_sign_out or backend

        self._state_machine = AuthStateMachine(
            persistence,
            verifier,
            revalidator,
            account_service=account_service,
            remote_sign_out=remote_sign_out,
            observer=self._observer or LoggingAuthObserver(),
            codec=SessionRecordCodec(
                default_timezone=self.settings.default_timezone,
                default_language=self.settings.default_language,
            ),
        )
        logger.info("Auth session module configured")
        return self._state_machine

    def _create_backend(self) -> HttpAuthBackend:
        if not self.settings.backend_url:
            raise AuthConfigurationError(
                "backend_url is required when no verifier and revalidator are injected"
            )
        backend = HttpAuthBackend(
            self.settings.backend_url,
            timeout_seconds=self.settings.request_timeout_seconds,
        )
        self._owned.append(backend)
        logger.debug(f"HTTP auth backend created for {backend.base_url}")
        return backend

    @property
    def state_machine(self) -> AuthStateMachine:
        return self.build()

    @property
    def configured(self) -> bool:
        return self._state_machine is not None

    async def shutdown(self) -> None:
        """Close resources created by this module."""
        logger.info("Shutting down auth session module")
        while self._owned:
            resource = self._owned.pop()
            close = getattr(resource, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.warning(f"Auth session resource cleanup issue: {e}")

    async def __aenter__(self) -> "AuthSessionModule":
        self.build()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()


def create_auth_session(
    settings: Optional[AuthSessionSettings] = None,
    **collaborators: Any,
) -> AuthStateMachine:
    """Build a state machine without keeping the module around.

    Resources created from settings are then the caller's to close; prefer
    ``AuthSessionModule`` when the HTTP backend or Redis come from settings.
    """
    return AuthSessionModule(settings, **collaborators).build()
