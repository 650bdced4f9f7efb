"""Identity backend adapters."""

from .http_auth_backend import HttpAuthBackend

__all__ = ["HttpAuthBackend"]
