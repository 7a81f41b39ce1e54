"""Components method that renders a component through an adapter."""

from collections.abc import Mapping
from typing import Any

from partsmith.core.collection import Collection
from partsmith.core.method_registry import MethodHandler
from partsmith.core.plugin_pipeline import call_async
from partsmith.infra.logging import get_logger
from partsmith.schemas.adapter import Adapter

logger = get_logger(__name__)


def resolve_target(target: Any, components: Collection) -> Any:
    """Find the component to render.

    A string is looked up by ``name`` in the components collection;
    anything else is rendered as given.

    Raises:
        LookupError: If no component has the given name
    """
    if not isinstance(target, str):
        return target
    found = components.find(name=target)
    if found is None:
        raise LookupError(f"Component '{target}' not found")
    return found


def render_method(adapter: Adapter) -> MethodHandler:
    """Build the ``render.<name>`` handler for ``adapter``.

    The bound method is called as ``render.<name>(target, context=None)``
    and returns an awaitable resolving to the adapter's output.
    """

    async def render(args: tuple[Any, ...], components: Collection, engine: Any) -> Any:
        if not args:
            raise TypeError(f"render.{adapter.name}() missing required argument: 'target'")
        target = resolve_target(args[0], components)
        context = args[1] if len(args) > 1 else None
        if context is not None and not isinstance(context, Mapping):
            raise TypeError(f"Render context must be a mapping, got {type(context).__name__}")

        logger.debug(
            "Rendering component",
            adapter=adapter.name,
            component=target.get("name") if isinstance(target, Mapping) else repr(target),
        )
        return await call_async(adapter.render, target, context or {}, engine)

    render.__qualname__ = f"render.{adapter.name}"
    return render
