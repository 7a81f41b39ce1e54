"""Plugin pipeline - ordered transformation of a record set.

Plugins run strictly one after another. Each receives the previous
plugin's output and the engine, and may return a value or an awaitable.
"""

import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any

from partsmith.core.errors import PipelineError
from partsmith.infra.logging import get_logger

logger = get_logger(__name__)

Plugin = Callable[[Any, Any], Any]


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def plugin_name(plugin: Plugin) -> str:
    """Descriptive name for a plugin, for logging."""
    return getattr(plugin, "__qualname__", None) or type(plugin).__name__


class PluginPipeline:
    """Ordered list of plugins applied sequentially to a record set.

    Each ``process`` call runs over the plugins registered at the moment
    it is invoked; later registrations do not affect a run in progress.
    """

    def __init__(self, name: str = "pipeline", plugins: list[Plugin] | None = None) -> None:
        self.name = name
        self._plugins: list[Plugin] = list(plugins or [])

    def use(self, plugin: Plugin) -> "PluginPipeline":
        """Append a plugin.

        Raises:
            ValueError: If plugin is not callable
        """
        if not callable(plugin):
            raise ValueError(f"Plugin must be callable, got {plugin!r}")
        self._plugins.append(plugin)
        return self

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        """Registered plugins in execution order."""
        return tuple(self._plugins)

    def copy(self) -> "PluginPipeline":
        """Independent pipeline with the same plugins."""
        return PluginPipeline(self.name, self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    async def process(self, data: Any, engine: Any = None) -> Any:
        """Run every plugin over ``data`` in registration order.

        Args:
            data: Initial record set
            engine: Engine reference passed to every plugin

        Returns:
            Output of the last plugin (``data`` if there are none)

        Raises:
            PipelineError: On the first plugin failure; later plugins do not run
        """
        plugins = tuple(self._plugins)
        run_start = time.perf_counter()

        for idx, plugin in enumerate(plugins):
            try:
                data = await resolve(plugin(data, engine))
            except PipelineError:
                raise
            except Exception as e:
                logger.error(
                    "Plugin FAILED",
                    pipeline=self.name,
                    plugin=plugin_name(plugin),
                    step_number=idx + 1,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise PipelineError.wrap(e, target=self.name, step=idx) from e

        logger.debug(
            "Pipeline processed",
            pipeline=self.name,
            total_plugins=len(plugins),
            duration_ms=int((time.perf_counter() - run_start) * 1000),
        )
        return data


async def call_async(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` and await its result when needed."""
    result: Any | Awaitable[Any] = fn(*args)
    return await resolve(result)
