"""
Typed callback registry for lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Callable, Generic, TypeVar

E = TypeVar("E", bound=Enum)

Listener = Callable[[], None]


class DatabaseEvent(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class EventBus(Generic[E]):
    """
    Minimal observer registry keyed by an enum of event names.

    Listeners take no arguments and run synchronously, in registration order,
    on the emitting thread. A listener that raises stops the emission and the
    error propagates to the caller of emit().
    """

    def __init__(self) -> None:
        self._listeners: dict[E, list[Listener]] = defaultdict(list)

    def on(self, event: E, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners[event].append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: E, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, event: E) -> int:
        """Call every listener for event. Returns the number of listeners called."""
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener()
        return len(listeners)

    def listener_count(self, event: E) -> int:
        return len(self._listeners.get(event, ()))
