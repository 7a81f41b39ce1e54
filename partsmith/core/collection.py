"""Collection - ordered records plus a table of bound query methods.

Methods are not set as attributes on the instance. They live in a
capability table and are dispatched through ``invoke``; attribute access
(``collection.count()``, ``collection.render.html(...)``) consults the
same table at call time.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, overload

from partsmith.core.method_registry import MethodHandler

_MISSING = object()


@dataclass(frozen=True)
class _Binding:
    handler: MethodHandler
    engine: Any


def _get_prop(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key, _MISSING)
    return getattr(record, key, _MISSING)


def _record_matches(
    record: Any,
    predicate: Callable[[Any], Any] | None,
    props: dict[str, Any],
) -> bool:
    if predicate is not None and not predicate(record):
        return False
    return all(_get_prop(record, key) == value for key, value in props.items())


class MethodNamespace:
    """Attribute proxy for a dotted method prefix such as ``render``."""

    def __init__(self, collection: "Collection", prefix: str) -> None:
        self._collection = collection
        self._prefix = prefix

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collection._resolve_attribute(f"{self._prefix}.{name}")

    def __repr__(self) -> str:
        return f"<MethodNamespace {self._prefix!r}>"


class Collection:
    """Immutable, ordered sequence of records with bound methods.

    Args:
        items: Records in order. A single payload (a mapping, string or
            non-iterable) becomes a one-record collection; None becomes an
            empty collection.
    """

    def __init__(self, items: Iterable[Any] | Any = None) -> None:
        if items is None:
            records: tuple[Any, ...] = ()
        elif isinstance(items, Collection):
            records = tuple(items.to_array())
        elif isinstance(items, Iterable) and not isinstance(items, (Mapping, str, bytes)):
            records = tuple(items)
        else:
            records = (items,)
        self._items = records
        self._bindings: dict[str, _Binding] = {}

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def to_array(self) -> list[Any]:
        """Records as a new list."""
        return list(self._items)

    def to_json(self) -> list[Any]:
        """Records as a plain list for serialization."""
        return [dict(item) if isinstance(item, Mapping) else item for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return list(self._items[index])
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"<Collection items={len(self._items)} methods={self.methods()}>"

    def find(self, predicate: Callable[[Any], Any] | None = None, **props: Any) -> Any | None:
        """First record matching ``predicate`` and every ``props`` value."""
        for record in self._items:
            if _record_matches(record, predicate, props):
                return record
        return None

    def filter(self, predicate: Callable[[Any], Any] | None = None, **props: Any) -> "Collection":
        """New Collection of matching records, carrying the same methods."""
        subset = Collection([r for r in self._items if _record_matches(r, predicate, props)])
        for name, binding in self._bindings.items():
            subset.bind(name, binding.handler, binding.engine)
        return subset

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def bind(self, name: str, handler: MethodHandler, engine: Any = None) -> "Collection":
        """Attach ``handler`` under ``name``, bound to this collection.

        The handler will be called as ``handler(args, self, engine)``.
        Binding an existing name replaces it. Names whose first segment is
        a Collection attribute (``find``, ``filter.x``) are rejected.
        """
        if not name or not isinstance(name, str):
            raise ValueError(f"Method name must be a non-empty string, got {name!r}")
        if is_reserved(name):
            raise ValueError(f"Method name '{name}' shadows a Collection attribute")
        if not callable(handler):
            raise ValueError(f"Method handler must be callable, got {handler!r}")
        self._bindings[name] = _Binding(handler=handler, engine=engine)
        return self

    def methods(self) -> list[str]:
        """Names of bound methods in binding order."""
        return list(self._bindings.keys())

    def has_method(self, name: str) -> bool:
        return name in self._bindings

    def method(self, name: str) -> Callable[..., Any]:
        """Bound callable for ``name``.

        Raises:
            KeyError: If no method is bound under ``name``
        """
        if name not in self._bindings:
            raise KeyError(f"Method '{name}' is not bound to this collection")
        binding = self._bindings[name]

        def bound(*args: Any) -> Any:
            return binding.handler(args, self, binding.engine)

        bound.__name__ = name.rsplit(".", 1)[-1]
        bound.__qualname__ = f"Collection.{name}"
        return bound

    def invoke(self, name: str, *args: Any) -> Any:
        """Call the method bound under ``name`` with ``args``."""
        return self.method(name)(*args)

    def _resolve_attribute(self, name: str) -> Any:
        if name in self._bindings:
            return self.method(name)
        prefix = f"{name}."
        if any(key.startswith(prefix) for key in self._bindings):
            return MethodNamespace(self, name)
        raise AttributeError(f"Collection has no method '{name}'")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._resolve_attribute(name)


RESERVED_NAMES = frozenset(name for name in dir(Collection) if not name.startswith("_"))


def is_reserved(name: str) -> bool:
    """Whether ``name`` or its first dotted segment is a Collection attribute."""
    return name.split(".", 1)[0] in RESERVED_NAMES
