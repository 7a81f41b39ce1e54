"""Event bus for lifecycle and log events.

Listeners are registered per event name. Hierarchical names are dotted
(``log.debug``); a listener registered as ``prefix.*`` receives every
event under that prefix and ``*`` receives everything.
"""

from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]

WILDCARD = "*"


def matches(pattern: str, event: str) -> bool:
    """Return True if a listener pattern matches an emitted event name."""
    if pattern == WILDCARD or pattern == event:
        return True
    if pattern.endswith(".*"):
        return event.startswith(pattern[:-1])
    return False


class EventBus:
    """Synchronous event registry.

    Listeners run in registration order. Exceptions raised by a listener
    propagate to the caller of ``emit``.
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[str, Listener, bool]] = []

    def on(self, event: str, listener: Listener) -> "EventBus":
        """Register a listener for an event name or pattern."""
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {type(listener).__name__}")
        self._listeners.append((event, listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventBus":
        """Register a listener that is removed after its first call."""
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {type(listener).__name__}")
        self._listeners.append((event, listener, True))
        return self

    def off(self, event: str, listener: Listener | None = None) -> "EventBus":
        """Remove listeners registered under ``event``.

        Without ``listener`` every listener for that exact pattern is removed.
        """
        self._listeners = [
            entry
            for entry in self._listeners
            if not (entry[0] == event and (listener is None or entry[1] == listener))
        ]
        return self

    def listeners(self, event: str) -> list[Listener]:
        """Listeners that would receive ``event``, in call order."""
        return [fn for pattern, fn, _ in self._listeners if matches(pattern, event)]

    def emit(self, event: str, *args: Any) -> bool:
        """Call every matching listener with ``args``.

        Returns:
            True if at least one listener was called
        """
        matched = [entry for entry in self._listeners if matches(entry[0], event)]
        if not matched:
            return False

        once = [entry for entry in matched if entry[2]]
        if once:
            self._listeners = [entry for entry in self._listeners if entry not in once]

        for _, listener, _ in matched:
            listener(*args)
        return True
