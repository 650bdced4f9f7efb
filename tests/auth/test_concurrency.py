"""Tests for overlapping operations.

Overlapping sign-ins are never cancelled: each one applies its own outcome
when its verification settles, so the call that settles last decides the
final state regardless of the order the calls were issued in.
"""

import asyncio
import json

import pytest

from neo_auth_session.application import AuthStateMachine
from neo_auth_session.core.entities import AuthStatus
from neo_auth_session.core.value_objects import VerificationResult


class SerialCheckingPersistence:
    """Memory store that records whether two writes ever overlapped."""

    def __init__(self):
        self.record = None
        self.active = 0
        self.overlapped = False
        self.writes = []

    async def get(self):
        return self.record

    async def set(self, record):
        self.active += 1
        if self.active > 1:
            self.overlapped = True
        await asyncio.sleep(0)
        self.record = record
        self.writes.append(json.loads(record)["id"])
        self.active -= 1

    async def clear(self):
        self.active += 1
        if self.active > 1:
            self.overlapped = True
        await asyncio.sleep(0)
        self.record = None
        self.active -= 1


@pytest.fixture
def gated_machine(persistence, gated_verifier, revalidator):
    return AuthStateMachine(persistence, gated_verifier, revalidator)


class TestLastSettledWins:
    """Overlapping sign-ins resolve by settlement order."""

    @pytest.mark.asyncio
    async def test_later_settlement_overrides_earlier_issue(
        self, gated_machine, gated_verifier, identity_factory, persistence
    ):
        """Test the second-issued call settling first loses to the first-issued call."""
        gated_verifier.prepare("first@x.com", VerificationResult.verified(identity_factory(id="u1", email="first@x.com")))
        gated_verifier.prepare("second@x.com", VerificationResult.verified(identity_factory(id="u2", email="second@x.com")))

        first = asyncio.ensure_future(gated_machine.sign_in("first@x.com", "secret"))
        second = asyncio.ensure_future(gated_machine.sign_in("second@x.com", "secret"))
        await asyncio.sleep(0)
        assert gated_verifier.calls == ["first@x.com", "second@x.com"]

        gated_verifier.release("second@x.com")
        second_result = await second
        assert gated_machine.get_auth_state().user.id == "u2"

        gated_verifier.release("first@x.com")
        first_result = await first

        assert first_result.success and second_result.success
        state = gated_machine.get_auth_state()
        assert state.user.id == "u1"
        assert json.loads(persistence.record)["id"] == "u1"

    @pytest.mark.asyncio
    async def test_late_failure_overrides_success(self, gated_machine, gated_verifier, identity_factory, persistence):
        """Test a failure settling last leaves the machine signed out."""
        gated_verifier.prepare("good@x.com", VerificationResult.verified(identity_factory(email="good@x.com")))
        gated_verifier.prepare("bad@x.com", VerificationResult.rejected("invalid_credentials"))

        good = asyncio.ensure_future(gated_machine.sign_in("good@x.com", "secret"))
        bad = asyncio.ensure_future(gated_machine.sign_in("bad@x.com", "wrong"))
        await asyncio.sleep(0)

        gated_verifier.release("good@x.com")
        await good
        gated_verifier.release("bad@x.com")
        await bad

        state = gated_machine.get_auth_state()
        assert not state.is_authenticated
        assert state.error == "Invalid email or password"
        # The rejected call never touches storage.
        assert json.loads(persistence.record)["email"] == "good@x.com"

    @pytest.mark.asyncio
    async def test_late_success_overrides_failure(self, gated_machine, gated_verifier, identity_factory):
        """Test a success settling last signs the user in."""
        gated_verifier.prepare("bad@x.com", VerificationResult.rejected("invalid_credentials"))
        gated_verifier.prepare("good@x.com", VerificationResult.verified(identity_factory(email="good@x.com")))

        good = asyncio.ensure_future(gated_machine.sign_in("good@x.com", "secret"))
        bad = asyncio.ensure_future(gated_machine.sign_in("bad@x.com", "wrong"))
        await asyncio.sleep(0)

        gated_verifier.release("bad@x.com")
        await bad
        gated_verifier.release("good@x.com")
        await good

        state = gated_machine.get_auth_state()
        assert state.is_authenticated
        assert state.error is None

    @pytest.mark.asyncio
    async def test_each_settlement_clears_loading(self, gated_machine, gated_verifier, identity_factory, recorder):
        """Test every settled call ends its own loading phase."""
        gated_verifier.prepare("a@x.com", VerificationResult.verified(identity_factory(id="a", email="a@x.com")))
        gated_verifier.prepare("b@x.com", VerificationResult.verified(identity_factory(id="b", email="b@x.com")))
        gated_machine.subscribe(recorder)

        calls = [
            asyncio.ensure_future(gated_machine.sign_in("a@x.com", "secret")),
            asyncio.ensure_future(gated_machine.sign_in("b@x.com", "secret")),
        ]
        await asyncio.sleep(0)
        gated_verifier.release("a@x.com")
        gated_verifier.release("b@x.com")
        await asyncio.gather(*calls)

        assert recorder.statuses == [
            "uninitialized",
            "authenticating",
            "authenticating",
            "authenticated",
            "authenticated",
        ]
        assert recorder.last.user.id == "b"


class TestOrderingGuarantees:
    """Test serialization of storage and state consistency."""

    @pytest.mark.asyncio
    async def test_storage_writes_never_overlap(self, gated_verifier, revalidator, identity_factory):
        """Test the store is used by one writer at a time."""
        store = SerialCheckingPersistence()
        machine = AuthStateMachine(store, gated_verifier, revalidator)
        emails = [f"user{i}@x.com" for i in range(5)]
        for i, email in enumerate(emails):
            gated_verifier.prepare(email, VerificationResult.verified(identity_factory(id=f"u{i}", email=email)))

        calls = [asyncio.ensure_future(machine.sign_in(email, "secret")) for email in emails]
        await asyncio.sleep(0)
        for email in emails:
            gated_verifier.release(email)
        sign_out = asyncio.ensure_future(machine.sign_out())
        await asyncio.gather(*calls, sign_out)

        assert not store.overlapped
        assert len(store.writes) == 5

    @pytest.mark.asyncio
    async def test_record_matches_final_state(self, gated_verifier, revalidator, identity_factory):
        """Test the stored record always belongs to the settled user."""
        store = SerialCheckingPersistence()
        machine = AuthStateMachine(store, gated_verifier, revalidator)
        for name in ("a", "b", "c"):
            gated_verifier.prepare(f"{name}@x.com", VerificationResult.verified(identity_factory(id=name, email=f"{name}@x.com")))

        calls = [asyncio.ensure_future(machine.sign_in(f"{name}@x.com", "secret")) for name in ("a", "b", "c")]
        await asyncio.sleep(0)
        for name in ("c", "a", "b"):
            gated_verifier.release(name + "@x.com")
            await asyncio.sleep(0)
        await asyncio.gather(*calls)

        state = machine.get_auth_state()
        assert json.loads(store.record)["id"] == state.user.id

    @pytest.mark.asyncio
    async def test_every_observed_state_is_consistent(
        self, gated_verifier, revalidator, identity_factory, stored_record, recorder, check_consistent
    ):
        """Test subscribers never see a settled state with mismatched fields."""
        store = SerialCheckingPersistence()
        store.record = stored_record()
        machine = AuthStateMachine(store, gated_verifier, revalidator)
        gated_verifier.prepare("a@x.com", VerificationResult.verified(identity_factory(id="a", email="a@x.com")))
        gated_verifier.prepare("b@x.com", VerificationResult.rejected("invalid_credentials"))
        machine.subscribe(recorder)

        ops = [
            asyncio.ensure_future(machine.initialize()),
            asyncio.ensure_future(machine.sign_in("a@x.com", "secret")),
            asyncio.ensure_future(machine.sign_in("b@x.com", "wrong")),
            asyncio.ensure_future(machine.sign_out()),
        ]
        await asyncio.sleep(0)
        gated_verifier.release("b@x.com")
        gated_verifier.release("a@x.com")
        await asyncio.gather(*ops)

        assert len(recorder.states) > 1
        for state in recorder.states:
            check_consistent(state)
        assert machine.get_auth_state().is_settled

    @pytest.mark.asyncio
    async def test_sign_out_during_sign_in(self, gated_machine, gated_verifier, identity, persistence):
        """Test a sign-in settling after sign-out wins, as with any later settlement."""
        gated_verifier.prepare("admin@x.com", VerificationResult.verified(identity))

        pending = asyncio.ensure_future(gated_machine.sign_in("admin@x.com", "secret"))
        await asyncio.sleep(0)
        await gated_machine.sign_out()
        assert gated_machine.get_auth_state().status is AuthStatus.UNAUTHENTICATED

        gated_verifier.release("admin@x.com")
        await pending

        assert gated_machine.get_auth_state().is_authenticated
        assert persistence.record is not None
