"""Free-form key/value settings for one engine, addressed by dotted path."""

import copy
from typing import Any

_MISSING = object()


class ConfigStore:
    """Nested mapping with dotted-path access.

    ``store.set("project.title", "Library")`` creates intermediate mappings;
    ``store.get("project.title")`` reads them back.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    @staticmethod
    def _split(path: str) -> list[str]:
        if not isinstance(path, str) or not path:
            raise KeyError(f"Config path must be a non-empty string, got {path!r}")
        return path.split(".")

    def get(self, path: str, default: Any = None) -> Any:
        """Value at ``path``, or ``default`` if any segment is missing."""
        node: Any = self._data
        for part in self._split(path):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def has(self, path: str) -> bool:
        return self.get(path, _MISSING) is not _MISSING

    def set(self, path: str, value: Any) -> None:
        """Store ``value`` at ``path``, replacing non-mapping intermediates."""
        parts = self._split(path)
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of every stored setting."""
        return copy.deepcopy(self._data)
