"""Ordered subscriber registry for authentication state fan-out."""

import itertools
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Tuple

from ..core.entities import AuthState

Listener = Callable[[AuthState], None]
ListenerErrorHandler = Callable[[Listener, Exception], None]


class Subscription:
    """Unsubscribe handle returned by ``SubscriberRegistry.subscribe``.

    Calling it (or ``unsubscribe()``) removes exactly the listener it was
    created for. Repeated calls are no-ops.
    """

    __slots__ = ("_registry", "_key")

    def __init__(self, registry: "SubscriberRegistry", key: int):
        self._registry: Optional[SubscriberRegistry] = registry
        self._key = key

    @property
    def active(self) -> bool:
        return self._registry is not None and self._registry.has(self._key)

    def unsubscribe(self) -> None:
        if self._registry is not None:
            self._registry.remove(self._key)
            self._registry = None

    def __call__(self) -> None:
        self.unsubscribe()


class SubscriberRegistry:
    """Ordered list of state listeners.

    Listeners are invoked synchronously in subscription order, each with its
    own snapshot. The listener list is copied before every pass, so listeners
    that unsubscribe (themselves or others) during a pass neither crash the
    loop nor shift delivery for the remaining ones. A listener that raises is
    reported to ``on_listener_error`` and does not block the others.
    """

    def __init__(self, on_listener_error: Optional[ListenerErrorHandler] = None):
        self._listeners: "OrderedDict[int, Listener]" = OrderedDict()
        self._keys = itertools.count()
        self._on_listener_error = on_listener_error

    def subscribe(self, listener: Listener, current: AuthState) -> Subscription:
        """Register ``listener`` and immediately deliver ``current`` to it.

        Args:
            listener: Callable receiving state snapshots
            current: State the listener is brought in sync with

        Returns:
            Handle that removes this registration
        """
        if not callable(listener):
            raise TypeError("Listener must be callable")

        key = next(self._keys)
        self._listeners[key] = listener
        self._deliver(key, listener, current)
        return Subscription(self, key)

    def remove(self, key: int) -> None:
        self._listeners.pop(key, None)

    def has(self, key: int) -> bool:
        return key in self._listeners

    def notify(self, state: AuthState) -> None:
        """Fan ``state`` out to every listener registered before this pass."""
        pending: List[Tuple[int, Listener]] = list(self._listeners.items())
        for key, listener in pending:
            if key not in self._listeners:
                continue
            self._deliver(key, listener, state)

    def _deliver(self, key: int, listener: Listener, state: AuthState) -> None:
        try:
            listener(state.snapshot())
        except Exception as e:
            if self._on_listener_error is not None:
                self._on_listener_error(listener, e)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def stats(self) -> Dict[str, int]:
        return {"listeners": len(self._listeners)}
