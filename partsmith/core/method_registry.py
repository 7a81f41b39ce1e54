"""Registry of collection methods for one target."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

MethodHandler = Callable[[tuple[Any, ...], Any, Any], Any]


@dataclass(frozen=True)
class Method:
    """A named method handler.

    The handler is called as ``handler(args, state, engine)``.
    """

    name: str
    handler: MethodHandler


class MethodRegistry:
    """Name to handler table used to extend a Collection.

    Registering a name twice replaces the earlier handler (last write wins);
    the name keeps the position of its first registration.
    """

    def __init__(self, methods: list[Method] | None = None) -> None:
        self._methods: dict[str, Method] = {}
        for method in methods or []:
            self._methods[method.name] = method

    def add(self, method: Method) -> None:
        """Register a method.

        Args:
            method: Method with a non-empty name and a callable handler

        Raises:
            ValueError: If name is empty or handler is not callable
        """
        if not method.name or not isinstance(method.name, str):
            raise ValueError(f"Method name must be a non-empty string, got {method.name!r}")

        if not callable(method.handler):
            raise ValueError(f"Method handler must be callable, got {method.handler!r}")

        self._methods[method.name] = method

    def get(self, name: str) -> Method:
        """Get a registered method.

        Raises:
            KeyError: If no method is registered under ``name``
        """
        if name not in self._methods:
            raise KeyError(f"Method '{name}' not found in registry")
        return self._methods[name]

    def iterate(self) -> Iterator[Method]:
        """Yield registered methods in registration order."""
        return iter(list(self._methods.values()))

    def names(self) -> list[str]:
        """Get list of all registered method names."""
        return list(self._methods.keys())

    def copy(self) -> "MethodRegistry":
        """Independent registry holding the same methods."""
        return MethodRegistry(list(self._methods.values()))

    def __iter__(self) -> Iterator[Method]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods
