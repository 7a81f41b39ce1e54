"""Processing lanes: one plugin pipeline, one method registry, one state."""

from dataclasses import dataclass, field
from typing import Literal

from partsmith.core.collection import Collection
from partsmith.core.method_registry import MethodRegistry
from partsmith.core.plugin_pipeline import PluginPipeline

TargetName = Literal["files", "components"]

TARGETS: tuple[str, ...] = ("files", "components")


@dataclass
class Target:
    """A named processing lane.

    ``state`` is None until the first successful run of the lane and is
    replaced, never merged, on each later run. It is read-only; only
    ``publish`` replaces it.
    """

    name: str
    plugins: PluginPipeline = field(init=False)
    methods: MethodRegistry = field(default_factory=MethodRegistry)
    _state: Collection | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.plugins = PluginPipeline(self.name)

    @property
    def state(self) -> Collection | None:
        return self._state

    def publish(self, collection: Collection) -> None:
        """Replace the state with the result of a successful run."""
        self._state = collection

    def snapshot(self) -> "TargetSnapshot":
        """Freeze the current plugin list and methods for one parse."""
        return TargetSnapshot(
            name=self.name,
            plugins=self.plugins.copy(),
            methods=self.methods.copy(),
        )


@dataclass(frozen=True)
class TargetSnapshot:
    """Plugins and methods of a Target as they were when a parse started."""

    name: str
    plugins: PluginPipeline
    methods: MethodRegistry

    def build(self, items: object, engine: object) -> Collection:
        """Wrap ``items`` in a Collection with every method bound to it."""
        collection = Collection(items)
        for method in self.methods:
            collection.bind(method.name, method.handler, engine)
        return collection
