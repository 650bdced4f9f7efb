"""Tests for credential sign-in."""

import json
from unittest.mock import AsyncMock

import pytest

from neo_auth_session.application import AuthStateMachine
from neo_auth_session.core.entities import AuthStatus, UserRole
from neo_auth_session.core.exceptions import AuthErrorCode, PersistenceError
from neo_auth_session.core.value_objects import RevalidationResult, VerificationResult
from neo_auth_session.infrastructure import MemoryPersistence


class TestSignIn:
    """Test sign_in() outcomes."""

    @pytest.mark.asyncio
    async def test_successful_login(self, machine, verifier, persistence, recorder):
        """Test mixed-case identifier signs in and persists a lower-cased email."""
        await machine.initialize()
        machine.subscribe(recorder)

        result = await machine.sign_in("Admin@X.com", "secret")

        assert result.success
        assert result.user.role is UserRole.MASTER_ADMIN
        state = machine.get_auth_state()
        assert state.is_authenticated
        assert state.user.role is UserRole.MASTER_ADMIN
        assert json.loads(persistence.record)["email"] == "admin@x.com"
        verifier.verify.assert_awaited_once_with("admin@x.com", "secret")
        assert recorder.statuses == ["unauthenticated", "authenticating", "authenticated"]

    @pytest.mark.asyncio
    async def test_authenticating_phase_clears_error(self, machine, verifier, recorder):
        """Test the transient phase is loading with no error."""
        verifier.verify.return_value = VerificationResult.rejected("invalid_credentials")
        await machine.initialize()
        await machine.sign_in("admin@x.com", "wrong")
        machine.subscribe(recorder)

        await machine.sign_in("admin@x.com", "wrong-again")

        authenticating = recorder.states[1]
        assert authenticating.status is AuthStatus.AUTHENTICATING
        assert authenticating.is_loading
        assert authenticating.error is None

    @pytest.mark.asyncio
    async def test_wrong_secret(self, machine, verifier, persistence):
        """Test invalid credentials surface a message and never write storage."""
        verifier.verify.return_value = VerificationResult.rejected("invalid_credentials")
        await machine.initialize()

        result = await machine.sign_in("admin@x.com", "wrong")

        assert not result.success
        assert result.error == "Invalid email or password"
        assert result.error_code is AuthErrorCode.INVALID_CREDENTIALS
        state = machine.get_auth_state()
        assert not state.is_authenticated
        assert state.error == "Invalid email or password"
        assert persistence.get_stats()["writes"] == 0

    @pytest.mark.asyncio
    async def test_inactive_account_reason(self, machine, verifier):
        """Test the inactive account reason."""
        verifier.verify.return_value = VerificationResult.rejected("inactive_account")

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.INACTIVE_ACCOUNT
        assert machine.get_auth_state().error == "This account has been deactivated"

    @pytest.mark.asyncio
    async def test_inactive_identity_is_refused(self, machine, verifier, identity_factory, persistence):
        """Test a verified but inactive identity never becomes authenticated."""
        verifier.verify.return_value = VerificationResult.verified(identity_factory(is_active=False))

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.INACTIVE_ACCOUNT
        assert not machine.get_auth_state().is_authenticated
        assert persistence.record is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [
        ConnectionError("refused"),
        TimeoutError(),
        RuntimeError("backend bug"),
    ])
    async def test_verifier_exception_is_network_error(self, machine, verifier, failure):
        """Test collaborator exceptions never escape."""
        verifier.verify.side_effect = failure

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.NETWORK_ERROR
        assert machine.get_auth_state().error_code is AuthErrorCode.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_verifier_result_of_wrong_type(self, machine, verifier, persistence, observer):
        """Test a result without the expected attributes settles as a network error."""
        verifier.verify.return_value = {"success": True}

        result = await machine.sign_in("admin@x.com", "secret")

        state = machine.get_auth_state()
        assert result.error_code is AuthErrorCode.NETWORK_ERROR
        assert state.status is AuthStatus.UNAUTHENTICATED
        assert state.is_loading is False
        assert persistence.record is None
        assert observer.on_failure.call_args[0][:2] == ("sign_in", AuthErrorCode.NETWORK_ERROR)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["unreachable", "rate_limited", None])
    async def test_unreachable_and_unknown_reasons(self, machine, verifier, reason):
        """Test unknown reasons are reported as network errors."""
        verifier.verify.return_value = VerificationResult(success=False, reason=reason)

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_malformed_identity_is_network_error(self, machine, verifier):
        """Test a success without a usable identity."""
        verifier.verify.return_value = VerificationResult(success=True, identity={"id": ""})

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_identity_without_email_uses_identifier(self, machine, verifier, identity_factory):
        """Test the login identifier fills a missing email."""
        identity = identity_factory()
        identity.pop("email")
        verifier.verify.return_value = VerificationResult.verified(identity)

        result = await machine.sign_in("Owner@Hotel.com", "secret")

        assert result.user.email == "owner@hotel.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier,secret", [
        ("", "secret"),
        ("admin@x.com", ""),
        (None, "secret"),
        ("admin@x.com", 123),
    ])
    async def test_precondition_violations_raise(self, machine, verifier, identifier, secret):
        """Test empty or non-string arguments are programmer errors."""
        with pytest.raises(ValueError):
            await machine.sign_in(identifier, secret)

        verifier.verify.assert_not_called()
        assert machine.get_auth_state().status is AuthStatus.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_persistence_failure(self, verifier, revalidator):
        """Test a failed write leaves the user signed out with a storage error."""
        persistence = AsyncMock()
        persistence.get = AsyncMock(return_value=None)
        persistence.set = AsyncMock(side_effect=PersistenceError())
        machine = AuthStateMachine(persistence, verifier, revalidator)

        result = await machine.sign_in("admin@x.com", "secret")

        assert result.error_code is AuthErrorCode.PERSISTENCE_ERROR
        state = machine.get_auth_state()
        assert not state.is_authenticated
        assert state.error == "Unable to store the session on this device"

    @pytest.mark.asyncio
    async def test_failed_sign_in_leaves_record_untouched(self, machine, verifier, persistence):
        """Test a rejected second sign-in does not touch the stored session."""
        await machine.sign_in("admin@x.com", "secret")
        record = persistence.record
        verifier.verify.return_value = VerificationResult.rejected("invalid_credentials")

        await machine.sign_in("admin@x.com", "wrong")

        assert persistence.record == record
        assert persistence.get_stats()["clears"] == 0
        assert not machine.get_auth_state().is_authenticated

    @pytest.mark.asyncio
    async def test_returned_user_is_a_snapshot(self, machine):
        """Test callers cannot mutate the machine's user."""
        result = await machine.sign_in("admin@x.com", "secret")

        result.user.preferences["theme"] = "light"

        assert machine.get_auth_state().user.preferences["theme"] == "dark"

    @pytest.mark.asyncio
    async def test_round_trip_through_fresh_machine(self, machine, persistence, verifier, identity):
        """Test the stored record restores the same user in a new machine."""
        result = await machine.sign_in("Admin@X.com", "secret")

        revalidator = AsyncMock()
        revalidator.revalidate = AsyncMock(
            side_effect=lambda user_id: RevalidationResult.confirmed(json.loads(persistence.record))
        )
        fresh = AuthStateMachine(MemoryPersistence(persistence.record), verifier, revalidator)

        state = await fresh.initialize()

        assert state.user.id == result.user.id
        assert state.user.email == result.user.email
        assert state.user.role == result.user.role
        assert state.user == result.user
