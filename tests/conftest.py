"""Pytest configuration and fixtures for neo-auth-session tests."""

import asyncio
import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from neo_auth_session.application import AuthStateMachine
from neo_auth_session.core.entities import AuthState
from neo_auth_session.core.value_objects import (
    AccountResult,
    ProfileUpdateResult,
    RevalidationResult,
    VerificationResult,
)
from neo_auth_session.infrastructure import MemoryPersistence


def make_identity(**overrides: Any) -> Dict[str, Any]:
    """Identity record as an identity backend would return it."""
    identity = {
        "id": "u1",
        "email": "admin@x.com",
        "full_name": "Admin User",
        "role": "master_admin",
        "is_active": True,
        "timezone": "America/Sao_Paulo",
        "language": "pt-BR",
        "preferences": {"theme": "dark"},
        "hotel_id": None,
        "hotel_name": None,
        "created_at": "2024-01-10T12:00:00+00:00",
        "updated_at": "2024-01-10T12:00:00+00:00",
    }
    identity.update(overrides)
    return identity


class StateRecorder:
    """Subscriber that keeps every snapshot it receives."""

    def __init__(self):
        self.states: List[AuthState] = []

    def __call__(self, state: AuthState) -> None:
        self.states.append(state)

    @property
    def last(self) -> Optional[AuthState]:
        return self.states[-1] if self.states else None

    @property
    def statuses(self) -> List[str]:
        return [state.status.value for state in self.states]


class GatedVerifier:
    """Credential verifier whose calls settle only when the test releases them."""

    def __init__(self):
        self.calls: List[str] = []
        self._gates: Dict[str, asyncio.Event] = {}
        self._results: Dict[str, VerificationResult] = {}

    def prepare(self, identifier: str, result: VerificationResult) -> None:
        self._gates[identifier] = asyncio.Event()
        self._results[identifier] = result

    def release(self, identifier: str) -> None:
        self._gates[identifier].set()

    async def verify(self, identifier: str, secret: str) -> VerificationResult:
        self.calls.append(identifier)
        await self._gates[identifier].wait()
        return self._results[identifier]


@pytest.fixture
def identity():
    """Sample identity record for user u1."""
    return make_identity()


@pytest.fixture
def identity_factory():
    """Factory for identity records with overrides."""
    return make_identity


@pytest.fixture
def stored_record():
    """Factory for serialized session records."""
    def _record(**overrides: Any) -> str:
        return json.dumps(make_identity(**overrides))
    return _record


@pytest.fixture
def persistence():
    """Empty in-memory persistence."""
    return MemoryPersistence()


@pytest.fixture
def verifier(identity):
    """Verifier that accepts any credentials for u1."""
    mock = AsyncMock()
    mock.verify = AsyncMock(return_value=VerificationResult.verified(identity))
    return mock


@pytest.fixture
def revalidator(identity):
    """Revalidator that confirms u1."""
    mock = AsyncMock()
    mock.revalidate = AsyncMock(return_value=RevalidationResult.confirmed(identity))
    return mock


@pytest.fixture
def account_service():
    """Account service that accepts every request."""
    mock = AsyncMock()
    mock.register = AsyncMock(return_value=AccountResult.done())
    mock.update_profile = AsyncMock(return_value=ProfileUpdateResult(success=True))
    mock.change_password = AsyncMock(return_value=AccountResult.done())
    mock.request_password_reset = AsyncMock(return_value=AccountResult.done())
    return mock


@pytest.fixture
def remote_sign_out():
    """Remote session terminator mock."""
    mock = AsyncMock()
    mock.end_session = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def observer():
    """Observer mock recording diagnostics."""
    return MagicMock()


@pytest.fixture
def machine(persistence, verifier, revalidator, account_service, remote_sign_out, observer):
    """State machine wired to in-memory persistence and mock collaborators."""
    return AuthStateMachine(
        persistence,
        verifier,
        revalidator,
        account_service=account_service,
        remote_sign_out=remote_sign_out,
        observer=observer,
    )


@pytest.fixture
def recorder():
    """Subscriber collecting snapshots."""
    return StateRecorder()


@pytest.fixture
def gated_verifier():
    """Verifier with manually released calls."""
    return GatedVerifier()


def assert_consistent(state: AuthState) -> None:
    """Settled states must pair is_authenticated with a user."""
    if not state.is_loading:
        assert state.is_authenticated == (state.user is not None)


@pytest.fixture
def check_consistent():
    return assert_consistent
