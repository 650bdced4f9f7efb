"""Infrastructure factories."""

from .persistence_factory import PersistenceFactory

__all__ = ["PersistenceFactory"]
