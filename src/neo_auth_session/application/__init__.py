"""Authentication session application layer.

- state_machine: AuthStateMachine, the only writer of AuthState
- subscriber_registry: ordered listener fan-out
- session_codec: persisted record serialization
- observers: logging and null diagnostics observers
"""

from .state_machine import AuthStateMachine
from .subscriber_registry import SubscriberRegistry, Subscription, Listener
from .session_codec import SessionRecordCodec
from .observers import LoggingAuthObserver, NullAuthObserver, mask_identifier

__all__ = [
    "AuthStateMachine",
    "SubscriberRegistry",
    "Subscription",
    "Listener",
    "SessionRecordCodec",
    "LoggingAuthObserver",
    "NullAuthObserver",
    "mask_identifier",
]
