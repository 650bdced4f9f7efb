"""Authentication session value objects."""

from .results import (
    VerificationResult,
    RevalidationResult,
    AccountResult,
    ProfileUpdateResult,
    OperationResult,
    SignInResult,
)

__all__ = [
    "VerificationResult",
    "RevalidationResult",
    "AccountResult",
    "ProfileUpdateResult",
    "OperationResult",
    "SignInResult",
]
