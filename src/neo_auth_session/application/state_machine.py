"""Authentication state machine.

Owns the canonical AuthState and the persisted session record. Every
operation is a coroutine that may suspend on collaborator calls; state
mutation and subscriber fan-out happen together without an ``await`` in
between, so no subscriber ever observes an inconsistent state.

Concurrency policy: there is no cancellation. When several ``sign_in`` calls
overlap, each applies its own outcome when its verifier call settles, so the
call that settles last determines the final state. Writes to the persistence
port and the matching state mutation run under one lock, which keeps the
stored record in step with the settled state and serializes writes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

from ..core.entities import AuthState, AuthStatus, User, UserRole, UPDATABLE_FIELDS
from ..core.exceptions import (
    AuthConfigurationError,
    AuthErrorCode,
    MalformedPersistedSession,
    NotAuthenticated,
)
from ..core.protocols import (
    AccountService,
    AuthObserver,
    CredentialVerifier,
    PersistencePort,
    RemoteSessionTerminator,
    SessionRevalidator,
)
from ..core.value_objects import OperationResult, SignInResult
from .observers import NullAuthObserver
from .session_codec import SessionRecordCodec
from .subscriber_registry import Listener, SubscriberRegistry, Subscription

logger = logging.getLogger(__name__)


class AuthStateMachine:
    """Client-side authentication session manager.

    Construct one per application and hand it to consumers through the
    composition root (see ``neo_auth_session.module``).
    """

    def __init__(
        self,
        persistence: PersistencePort,
        verifier: CredentialVerifier,
        revalidator: SessionRevalidator,
        *,
        account_service: Optional[AccountService] = None,
        remote_sign_out: Optional[RemoteSessionTerminator] = None,
        observer: Optional[AuthObserver] = None,
        codec: Optional[SessionRecordCodec] = None,
    ):
        """Initialize the state machine with its collaborators.

        Args:
            persistence: Storage for the single session record
            verifier: Credential verification backend
            revalidator: Session revalidation backend
            account_service: Profile/password backend, required only by the
                account operations
            remote_sign_out: Optional server-side session terminator
            observer: Diagnostics sink, silent by default
            codec: Session record codec, defaults to stock locale defaults
        """
        if persistence is None or verifier is None or revalidator is None:
            raise AuthConfigurationError(
                "Persistence, verifier and revalidator are required"
            )

        self._persistence = persistence
        self._verifier = verifier
        self._revalidator = revalidator
        self._account_service = account_service
        self._remote_sign_out = remote_sign_out
        self._observer: AuthObserver = observer or NullAuthObserver()
        self._codec = codec or SessionRecordCodec()

        self._state = AuthState()
        self._registry = SubscriberRegistry(on_listener_error=self._listener_failed)
        self._storage_lock = asyncio.Lock()
        self._initialization: Optional["asyncio.Future[AuthState]"] = None
        self._revalidation: Optional["asyncio.Future[AuthState]"] = None

    # State access

    def get_auth_state(self) -> AuthState:
        """Immutable snapshot of the current state."""
        return self._state.snapshot()

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a state listener; it is called at once with the current state."""
        return self._registry.subscribe(listener, self._state)

    @property
    def is_initialized(self) -> bool:
        return (
            self._initialization is not None
            and self._initialization.done()
            and not _failed(self._initialization)
        )

    # Lifecycle

    async def initialize(self) -> AuthState:
        """Restore the persisted session, revalidating it before trusting it.

        Only the first call does any work; concurrent calls await the same
        in-flight run, later calls return at once. A run that raised is not
        kept, so the next call starts over.

        Returns:
            Current state once initialization has settled
        """
        if self._initialization is None or _failed(self._initialization):
            self._initialization = asyncio.ensure_future(self._initialize())
        if not self._initialization.done():
            await asyncio.shield(self._initialization)
        return self.get_auth_state()

    async def revalidate(self) -> AuthState:
        """Re-run revalidation for the current session on demand.

        Before initialization has settled this is the same as ``initialize``.
        Concurrent calls share one revalidator call.
        """
        if not self.is_initialized:
            return await self.initialize()

        if self._revalidation is None or self._revalidation.done():
            self._revalidation = asyncio.ensure_future(
                self._restore(self._state.user, "revalidate")
            )
        await asyncio.shield(self._revalidation)
        return self.get_auth_state()

    async def sign_in(self, identifier: str, secret: str) -> SignInResult:
        """Verify credentials and start a session.

        Args:
            identifier: Login email, compared case-insensitively
            secret: Password

        Returns:
            Result with the signed-in user, or the surfaced error

        Raises:
            ValueError: If either argument is empty or not a string
        """
        if not isinstance(identifier, str) or not identifier:
            raise ValueError("identifier must be a non-empty string")
        if not isinstance(secret, str) or not secret:
            raise ValueError("secret must be a non-empty string")

        identifier = identifier.lower()
        self._apply(self._state.begin(AuthStatus.AUTHENTICATING))

        try:
            verification = await self._verifier.verify(identifier, secret)
            success, identity, reason = verification.success, verification.identity, verification.reason
        except Exception as e:
            return await self._reject_sign_in(AuthErrorCode.NETWORK_ERROR, e)

        if not success:
            return await self._reject_sign_in(AuthErrorCode.from_reason(reason))

        try:
            user = self._codec.build_user(identity, fallback_email=identifier)
        except ValueError as e:
            return await self._reject_sign_in(AuthErrorCode.NETWORK_ERROR, e)

        if not user.is_active:
            return await self._reject_sign_in(AuthErrorCode.INACTIVE_ACCOUNT)

        state = await self._store_and_settle(user, "sign_in")
        if not state.is_authenticated:
            return SignInResult.failed(AuthErrorCode.PERSISTENCE_ERROR)
        return SignInResult.signed_in(user.snapshot())

    async def sign_out(self) -> None:
        """End the session. Local clearing always happens, whatever fails remotely."""
        previous_user = self._state.user
        if previous_user is not None:
            self._apply(self._state.begin(AuthStatus.SIGNING_OUT))

            if self._remote_sign_out is not None:
                try:
                    await self._remote_sign_out.end_session(previous_user.id)
                except Exception as e:
                    self._failure("sign_out", AuthErrorCode.NETWORK_ERROR, e)

        await self._discard_session("sign_out")

    # Account operations

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        *,
        hotel_name: Optional[str] = None,
        role: Union[UserRole, str] = UserRole.HOTEL_OWNER,
    ) -> OperationResult:
        """Register a new account without signing it in.

        The machine shows a ``REGISTERING`` loading phase and settles back to
        Unauthenticated, carrying the mapped error when registration failed.
        If another operation settles first, its state is left in place.

        Args:
            email: Login email, stored trimmed and lower-cased
            password: Initial password
            full_name: Display name
            hotel_name: Hotel the owner registers with
            role: Requested role; the legacy ``client`` name is accepted

        Returns:
            Operation result

        Raises:
            ValueError: If an argument is empty, the role is unknown or a
                user is currently signed in
        """
        for name, value in (("email", email), ("password", password), ("full_name", full_name)):
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string")
        role = UserRole.parse(role)
        if self._state.user is not None:
            raise ValueError("Sign out before registering a new account")

        account = self._require_account_service()
        self._apply(self._state.begin(AuthStatus.REGISTERING))

        code, _ = await self._account_call(
            "sign_up",
            account.register,
            email.strip().lower(),
            password,
            full_name.strip(),
            hotel_name,
            role.value,
        )

        async with self._storage_lock:
            if self._state.status is AuthStatus.REGISTERING:
                self._apply(AuthState.unauthenticated(code))
        return OperationResult.failed(code) if code else OperationResult.ok()

    async def update_profile(self, changes: Mapping[str, Any]) -> OperationResult:
        """Update display/locale fields of the signed-in user.

        Args:
            changes: Subset of ``UPDATABLE_FIELDS`` with new values

        Returns:
            Operation result; on success subscribers have seen the new user

        Raises:
            NotAuthenticated: If called outside the Authenticated state
            ValueError: If a field is not updatable or a value is invalid
        """
        user = self._require_authenticated("update_profile")

        changes = dict(changes)
        if not changes:
            raise ValueError("No profile changes given")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        user.with_changes(changes)

        account = self._require_account_service()
        code, result = await self._account_call("update_profile", account.update_profile, user.id, changes)
        if code is not None:
            return OperationResult.failed(code)

        accepted = getattr(result, "accepted", None)
        if accepted is None:
            accepted = changes
        elif isinstance(accepted, Mapping):
            accepted = {
                key: value
                for key, value in accepted.items()
                if key in UPDATABLE_FIELDS or key == "updated_at"
            }
        else:
            self._failure("update_profile", AuthErrorCode.NETWORK_ERROR)
            return OperationResult.failed(AuthErrorCode.NETWORK_ERROR)
        accepted.setdefault("updated_at", _utcnow())
        return await self._commit_user_changes(user.id, accepted, "update_profile")

    async def change_password(self, current_password: str, new_password: str) -> OperationResult:
        """Change the signed-in user's password.

        Raises:
            NotAuthenticated: If called outside the Authenticated state
            ValueError: If either password is empty
        """
        user = self._require_authenticated("change_password")

        if not isinstance(current_password, str) or not current_password:
            raise ValueError("current_password must be a non-empty string")
        if not isinstance(new_password, str) or not new_password:
            raise ValueError("new_password must be a non-empty string")

        account = self._require_account_service()
        code, _ = await self._account_call(
            "change_password", account.change_password, user.id, user.email, current_password, new_password
        )
        if code is AuthErrorCode.INVALID_CREDENTIALS:
            return OperationResult.failed(code, "Current password is incorrect")
        if code is not None:
            return OperationResult.failed(code)

        return await self._commit_user_changes(user.id, {"updated_at": _utcnow()}, "change_password")

    async def request_password_reset(self, email: str) -> OperationResult:
        """Ask the backend to send a reset link. Valid in any state; never mutates state.

        Raises:
            ValueError: If ``email`` is empty
        """
        if not isinstance(email, str) or not email:
            raise ValueError("email must be a non-empty string")

        account = self._require_account_service()
        code, _ = await self._account_call("request_password_reset", account.request_password_reset, email.lower())
        return OperationResult.failed(code) if code else OperationResult.ok()

    # Internals

    async def _initialize(self) -> AuthState:
        self._apply(self._state.begin(AuthStatus.INITIALIZING))
        try:
            return await self._restore(None, "initialize")
        except Exception as e:
            self._failure("initialize", AuthErrorCode.NETWORK_ERROR, e)
            return await self._settle(AuthState.unauthenticated(AuthErrorCode.NETWORK_ERROR))

    async def _restore(self, known: Optional[User], operation: str) -> AuthState:
        """Revalidate ``known`` (or the persisted user) and settle accordingly."""
        in_memory = known is not None

        if known is None:
            try:
                async with self._storage_lock:
                    record = await self._persistence.get()
            except MalformedPersistedSession as e:
                self._failure(operation, e.code, e)
                return await self._discard_session(operation)
            except Exception as e:
                self._failure(operation, AuthErrorCode.PERSISTENCE_ERROR, e)
                record = None

            if record is None:
                return await self._settle(AuthState.unauthenticated())

            try:
                known = self._codec.decode(record)
            except MalformedPersistedSession as e:
                self._failure(operation, e.code, e)
                return await self._discard_session(operation)

        try:
            result = await self._revalidator.revalidate(known.id)
            valid, identity = result.valid, result.identity
        except Exception as e:
            self._failure(operation, AuthErrorCode.NETWORK_ERROR, e)
            if in_memory:
                return self._state
            return await self._settle(AuthState.unauthenticated(AuthErrorCode.NETWORK_ERROR))

        if not valid:
            self._failure(operation, AuthErrorCode.STALE_SESSION)
            return await self._discard_session(operation)

        try:
            user = self._codec.build_user(identity, fallback_email=known.email)
        except ValueError as e:
            self._failure(operation, AuthErrorCode.NETWORK_ERROR, e)
            if in_memory:
                return self._state
            return await self._settle(AuthState.unauthenticated(AuthErrorCode.NETWORK_ERROR))

        if user.id != known.id or not user.is_active:
            self._failure(operation, AuthErrorCode.STALE_SESSION)
            return await self._discard_session(operation)

        return await self._store_and_settle(user, operation)

    async def _reject_sign_in(
        self,
        code: AuthErrorCode,
        error: Optional[BaseException] = None,
    ) -> SignInResult:
        self._failure("sign_in", code, error)
        await self._settle(AuthState.unauthenticated(code))
        return SignInResult.failed(code)

    async def _store_and_settle(self, user: User, operation: str) -> AuthState:
        """Write the record for ``user`` and become Authenticated."""
        async with self._storage_lock:
            try:
                await self._persistence.set(self._codec.encode(user))
            except Exception as e:
                self._failure(operation, AuthErrorCode.PERSISTENCE_ERROR, e)
                state = AuthState.unauthenticated(AuthErrorCode.PERSISTENCE_ERROR)
            else:
                state = AuthState.authenticated(user)
            self._apply(state)
        return state

    async def _discard_session(self, operation: str) -> AuthState:
        """Clear the record and become Unauthenticated without a visible error."""
        async with self._storage_lock:
            try:
                await self._persistence.clear()
            except Exception as e:
                self._failure(operation, AuthErrorCode.PERSISTENCE_ERROR, e)
            state = AuthState.unauthenticated()
            self._apply(state)
        return state

    async def _settle(self, state: AuthState) -> AuthState:
        async with self._storage_lock:
            self._apply(state)
        return state

    async def _account_call(
        self,
        operation: str,
        call: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> Tuple[Optional[AuthErrorCode], Any]:
        """Run an account backend call; returns the surfaced code (or None) and the result."""
        try:
            result = await call(*args)
            success, reason = result.success, result.reason
        except Exception as e:
            self._failure(operation, AuthErrorCode.NETWORK_ERROR, e)
            return AuthErrorCode.NETWORK_ERROR, None

        if not success:
            code = AuthErrorCode.from_reason(reason)
            self._failure(operation, code)
            return code, result
        return None, result

    async def _commit_user_changes(
        self,
        user_id: str,
        changes: Dict[str, Any],
        operation: str,
    ) -> OperationResult:
        async with self._storage_lock:
            current = self._state.user
            if current is None or current.id != user_id:
                # Session ended or changed hands while the backend call was pending.
                self._failure(operation, AuthErrorCode.NOT_AUTHENTICATED)
                return OperationResult.failed(AuthErrorCode.NOT_AUTHENTICATED)

            try:
                updated = current.with_changes(changes)
            except ValueError as e:
                self._failure(operation, AuthErrorCode.NETWORK_ERROR, e)
                return OperationResult.failed(AuthErrorCode.NETWORK_ERROR)

            try:
                await self._persistence.set(self._codec.encode(updated))
            except Exception as e:
                self._failure(operation, AuthErrorCode.PERSISTENCE_ERROR, e)
                return OperationResult.failed(AuthErrorCode.PERSISTENCE_ERROR)

            self._apply(self._state.with_user(updated))
        return OperationResult.ok()

    def _require_authenticated(self, operation: str) -> User:
        state = self._state
        if state.status is not AuthStatus.AUTHENTICATED or state.user is None:
            raise NotAuthenticated(
                details={"operation": operation, "status": state.status.value}
            )
        return state.user

    def _require_account_service(self) -> AccountService:
        if self._account_service is None:
            raise AuthConfigurationError("No account service configured")
        return self._account_service

    def _apply(self, state: AuthState) -> None:
        """Replace the state and fan it out. Never awaits."""
        previous = self._state
        self._state = state
        self._report(self._observer.on_transition, previous, state)
        self._registry.notify(state)

    def _failure(
        self,
        operation: str,
        code: AuthErrorCode,
        error: Optional[BaseException] = None,
    ) -> None:
        self._report(self._observer.on_failure, operation, code, error)

    def _listener_failed(self, listener: Listener, error: Exception) -> None:
        self._report(self._observer.on_listener_error, listener, error)

    @staticmethod
    def _report(callback: Callable[..., None], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception("Auth observer callback failed")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _failed(future: "asyncio.Future[Any]") -> bool:
    """True once ``future`` has finished with an exception or was cancelled."""
    if not future.done():
        return False
    return future.cancelled() or future.exception() is not None
