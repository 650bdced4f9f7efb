"""Authentication session protocols.

Contracts for the external collaborators of the state machine.
"""

from .persistence_port import PersistencePort
from .credential_verifier import CredentialVerifier
from .session_revalidator import SessionRevalidator
from .account_service import AccountService, RemoteSessionTerminator
from .auth_observer import AuthObserver

__all__ = [
    "PersistencePort",
    "CredentialVerifier",
    "SessionRevalidator",
    "AccountService",
    "RemoteSessionTerminator",
    "AuthObserver",
]
