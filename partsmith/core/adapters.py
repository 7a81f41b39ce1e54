"""Registry for render adapters."""

from collections.abc import Iterator

from partsmith.core import validate
from partsmith.core.errors import InvalidAdapter
from partsmith.infra.logging import get_logger
from partsmith.schemas.adapter import Adapter

logger = get_logger(__name__)


class AdapterRegistry:
    """Adapters keyed by name, in registration order."""

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}

    def check(self, descriptor: object) -> Adapter:
        """Validate a descriptor without registering it.

        Raises:
            InvalidAdapter: If the descriptor is malformed or the name is taken
        """
        adapter = validate.adapter(descriptor)
        if adapter.name in self._adapters:
            raise InvalidAdapter(f"Adapter '{adapter.name}' is already registered")
        return adapter

    def add(self, descriptor: object) -> Adapter:
        """Validate and register an adapter."""
        adapter = self.check(descriptor)
        self._adapters[adapter.name] = adapter
        logger.debug("Adapter registered", name=adapter.name, extensions=list(adapter.extensions))
        return adapter

    def get(self, name: str) -> Adapter:
        """Get a registered adapter.

        Raises:
            KeyError: If adapter not registered
        """
        if name not in self._adapters:
            raise KeyError(f"Adapter not registered: {name}")
        return self._adapters[name]

    def names(self) -> list[str]:
        return list(self._adapters.keys())

    def __iter__(self) -> Iterator[Adapter]:
        return iter(list(self._adapters.values()))

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters
