"""Engine - configures the two processing lanes and runs parses.

A parse reads raw records from the file source, runs them through the
files plugins, hands the resulting files to the transformer, runs the
transformer's output through the components plugins, and publishes both
collections as the engine state.

Example:
    engine = Engine({"src": "./patterns"})
    engine.add_plugin(tag_readmes, "files")
    engine.set_transformer(files_to_components)
    engine.add_method("count", lambda args, state, engine: len(state))

    components, files = await engine.parse()
    components.count()
"""

import asyncio
import inspect
import os
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum
from typing import Any, NamedTuple

from partsmith.core import validate
from partsmith.core.adapters import AdapterRegistry
from partsmith.core.collection import Collection
from partsmith.core.commands import CommandRegistry
from partsmith.core.config_store import ConfigStore
from partsmith.core.errors import (
    InvalidAdapter,
    InvalidCallback,
    InvalidExtension,
    InvalidSrc,
    PipelineError,
    SourceIOError,
)
from partsmith.core.events import EventBus
from partsmith.core.method_registry import Method, MethodHandler
from partsmith.core.plugin_pipeline import Plugin, call_async, plugin_name
from partsmith.core.target import Target, TargetSnapshot
from partsmith.infra.file_source import ChangeCallback, FileSource, Source
from partsmith.infra.logging import get_logger
from partsmith.methods.render import render_method
from partsmith.plugins.adapter_tag import adapter_tag_plugin
from partsmith.schemas.adapter import Adapter

logger = get_logger(__name__)

Transformer = Callable[[list[Any]], Any]


class ParseStatus(str, Enum):
    """Lifecycle status of an engine."""

    IDLE = "idle"
    PARSING = "parsing"


class ParseResult(NamedTuple):
    """Outcome of a successful parse."""

    components: Collection
    files: Collection


class EngineState(NamedTuple):
    """Published collections; None until the lane's first successful run."""

    files: Collection | None
    components: Collection | None


class _ParsePlan(NamedTuple):
    """Lanes, transformer and sources captured when a parse is called."""

    files: TargetSnapshot
    components: TargetSnapshot
    transformer: Transformer
    src: list[str]


def default_transformer(files: list[Any]) -> list[Any]:
    """Produce no components."""
    return []


def _ignore_error(err: BaseException) -> None:
    """Default ``error`` listener; parse failures reach the caller directly."""


def normalize_paths(src: Any) -> list[str]:
    """Turn a path or list of paths into absolute path strings.

    Raises:
        InvalidSrc: If any entry is not a non-empty string or path-like
    """
    items = [src] if isinstance(src, (str, os.PathLike)) else src
    if not isinstance(items, Iterable) or isinstance(items, (bytes, Mapping)):
        raise InvalidSrc(f"Source must be a path or a list of paths, got {src!r}")

    paths: list[str] = []
    for item in items:
        if isinstance(item, os.PathLike):
            item = os.fspath(item)
        validate.src(item)
        paths.append(os.path.abspath(os.path.expanduser(item)))
    return paths


class Engine(EventBus):
    """Two-stage plugin engine for files and components.

    Emits ``parse.start``, ``parse.complete`` (components, files),
    ``error`` (err) and ``log.<level>`` (message, data, level).

    Only one parse runs at a time per engine; a parse started while another
    is in flight waits for it to finish.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        source: Source | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            config: Options applied with ``configure``
            source: File-source collaborator. Defaults to a FileSource.

        Raises:
            InvalidConfig: If config has the wrong shape
        """
        if config is not None:
            validate.config(config)

        super().__init__()

        self._files = Target("files")
        self._components = Target("components")
        self._transformer: Transformer = default_transformer
        self._src: list[str] = []
        self._commands = CommandRegistry()
        self._adapters = AdapterRegistry()
        self._config = ConfigStore()
        self._source: Source = source or FileSource()
        self._lock = asyncio.Lock()
        self._status = ParseStatus.IDLE

        if config is not None:
            self.configure(config)

        self.on("error", _ignore_error)

    # =========================================================================
    # Configuration
    # =========================================================================

    def configure(self, config: Mapping[str, Any] | None = None) -> "Engine":
        """Apply configuration options.

        Everything is validated before anything is applied.

        Raises:
            ConfigurationError: If any option is invalid
        """
        options = validate.config(config if config is not None else {})
        self.log("Applying configuration", dict(config or {}))

        src = normalize_paths(options.src) if options.src is not None else []
        adapters = self._check_adapters(options.adapters or [])
        for methods in (options.methods or {}).values():
            for name, handler in methods.items():
                validate.method(name, handler)
        for extension in options.extensions or []:
            self._check_extension(extension)

        if src:
            self.add_src(src)
        for adapter in adapters:
            self.add_adapter(adapter)
        for target, plugins in (options.plugins or {}).items():
            for plugin in plugins:
                self.add_plugin(plugin, target)
        for target, methods in (options.methods or {}).items():
            for name, handler in methods.items():
                self.add_method(name, handler, target)
        if options.transformer is not None:
            self.set_transformer(options.transformer)
        for key, value in options.settings.items():
            self._config.set(key, value)
        for extension in options.extensions or []:
            self.add_extension(extension)

        return self

    def _check_adapters(self, descriptors: list[Adapter]) -> list[Adapter]:
        adapters = [self._adapters.check(descriptor) for descriptor in descriptors]
        names = [adapter.name for adapter in adapters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise InvalidAdapter(f"Adapters configured more than once: {duplicates}")
        return adapters

    @staticmethod
    def _check_extension(extension: Any) -> None:
        validate.extension(extension)
        if inspect.iscoroutinefunction(extension):
            raise InvalidExtension("Extensions must be synchronous functions")

    def get(self, path: str | None = None, default: Any = None) -> Any:
        """Read a setting by dotted path; without a path, all settings."""
        if path is None:
            return self._config.to_dict()
        return self._config.get(path, default)

    def set(self, path: str, value: Any) -> "Engine":
        """Store a setting by dotted path."""
        self._config.set(path, value)
        return self

    def add_src(self, src: Any) -> "Engine":
        """Add one or more source paths.

        Paths are made absolute; paths already present are skipped.

        Raises:
            InvalidSrc: If any path is invalid (nothing is added)
        """
        for path in normalize_paths(src):
            if path in self._src:
                continue
            self.log(f"Adding src: {path}")
            self._src.append(path)
        return self

    def add_plugin(self, plugin: Plugin, target: str = "components") -> "Engine":
        """Append a plugin to a target's pipeline.

        Raises:
            InvalidEntityType: If target is unknown
            InvalidPlugin: If plugin is not callable
        """
        validate.entity_type(target)
        validate.plugin(plugin)
        self._target(target).plugins.use(plugin)
        self.log("Plugin added", {"target": target, "plugin": plugin_name(plugin)})
        return self

    def add_method(self, name: str, handler: MethodHandler, target: str = "components") -> "Engine":
        """Register a collection method on a target.

        The handler is called as ``handler(args, state, engine)`` where
        ``state`` is the collection it was bound to at parse time.

        Raises:
            InvalidMethod: If name or handler is invalid
            InvalidEntityType: If target is unknown
        """
        validate.method(name, handler)
        validate.entity_type(target)
        self._target(target).methods.add(Method(name=name, handler=handler))
        self.log("Method added", {"target": target, "name": name})
        return self

    def add_command(self, command: Any) -> "Engine":
        """Register a command descriptor.

        Raises:
            InvalidCommand: If the descriptor is malformed or the name is taken
        """
        self._commands.add(command)
        return self

    def add_extension(self, extension: Callable[["Engine"], Any]) -> "Engine":
        """Call ``extension(engine)`` immediately.

        Raises:
            InvalidExtension: If extension is not a synchronous callable
        """
        self._check_extension(extension)
        extension(self)
        return self

    def add_adapter(self, adapter: Any) -> "Engine":
        """Register a render adapter.

        Adds a files plugin that tags matching records and a
        ``render.<name>`` components method.

        Raises:
            InvalidAdapter: If the descriptor is malformed or the name is taken
        """
        registered = self._adapters.add(adapter)
        self.add_plugin(adapter_tag_plugin(registered), "files")
        self.add_method(f"render.{registered.name}", render_method(registered))
        return self

    def set_transformer(self, transformer: Transformer) -> "Engine":
        """Replace the files to components transformer.

        Raises:
            InvalidTransformer: If transformer is not callable
        """
        validate.transformer(transformer)
        self._transformer = transformer
        return self

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse(
        self,
        callback: Callable[[BaseException | None, Collection | None, Collection | None], Any] | None = None,
    ) -> Awaitable[ParseResult | None]:
        """Read and process all sources.

        The plugins, methods, transformer and source paths are captured, and
        the callback is validated, when ``parse`` is called. The returned
        awaitable runs the parse; nothing is read until it is awaited. A
        parse called while another is running waits for it, then runs with
        the configuration captured at its own call.

        Awaiting without a callback returns the ParseResult or raises the
        failure. With a callback, ``callback(err, components, files)`` is
        called once and the awaitable resolves to None; a failure is passed
        as ``err`` with both results None.

        Raises:
            InvalidCallback: If callback cannot take three arguments (at call)
            PipelineError: If a plugin or the transformer fails (no callback)
            SourceIOError: If sources cannot be read (no callback)
        """
        if callback is not None:
            validate.callback(callback)
        plan = _ParsePlan(
            files=self._files.snapshot(),
            components=self._components.snapshot(),
            transformer=self._transformer,
            src=list(self._src),
        )
        if callback is None:
            return self._run(plan)
        return self._run_with_callback(plan, callback)

    async def _run_with_callback(
        self,
        plan: _ParsePlan,
        callback: Callable[[BaseException | None, Collection | None, Collection | None], Any],
    ) -> None:
        try:
            result = await self._run(plan)
        except Exception as err:
            await call_async(callback, err, None, None)
            return
        await call_async(callback, None, result.components, result.files)

    async def _run(self, plan: _ParsePlan) -> ParseResult:
        async with self._lock:
            self._status = ParseStatus.PARSING
            parse_start = time.perf_counter()
            logger.info(
                "Parse started",
                src=plan.src,
                files_plugins=len(plan.files.plugins),
                components_plugins=len(plan.components.plugins),
            )

            try:
                self.emit("parse.start")
                raw = await self._read(plan.src)
                files = await self._process(raw if raw is not None else [], plan.files, self._files)
                output = await self._transform(plan.transformer, files.to_array())
                components = await self._process(output, plan.components, self._components)
                logger.info(
                    "Parse completed",
                    files=len(files),
                    components=len(components),
                    duration_ms=int((time.perf_counter() - parse_start) * 1000),
                )
                self.emit("parse.complete", components, files)
            except Exception as err:
                logger.warning(
                    "Parse failed",
                    error_type=type(err).__name__,
                    error_message=str(err),
                    duration_ms=int((time.perf_counter() - parse_start) * 1000),
                )
                self._emit_error(err)
                raise
            finally:
                self._status = ParseStatus.IDLE

            return ParseResult(components=components, files=files)

    def _emit_error(self, err: BaseException) -> None:
        """Emit ``error``; a failing listener never replaces ``err``."""
        try:
            self.emit("error", err)
        except Exception as listener_err:
            logger.error(
                "Error listener FAILED",
                error_type=type(listener_err).__name__,
                error_message=str(listener_err),
                original_error=type(err).__name__,
                exc_info=True,
            )

    async def _read(self, src: list[str]) -> Any:
        try:
            return await call_async(self._source.read_all, src)
        except SourceIOError:
            raise
        except Exception as e:
            raise SourceIOError(f"Failed to read sources: {e}", src) from e

    async def _transform(self, transformer: Transformer, files: list[Any]) -> Any:
        try:
            return await call_async(transformer, files)
        except PipelineError:
            raise
        except Exception as e:
            logger.error(
                "Transformer FAILED",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise PipelineError.wrap(e, target="transformer") from e

    async def _process(self, data: Any, lane: TargetSnapshot, target: Target) -> Collection:
        """Run a lane's plugins, bind its methods and publish the result."""
        items = await lane.plugins.process(data, self)
        collection = lane.build(items, self)
        target.publish(collection)
        logger.debug(
            "Target processed",
            target=lane.name,
            records=len(collection),
            methods=collection.methods(),
        )
        return collection

    # =========================================================================
    # Watching and logging
    # =========================================================================

    def watch(
        self,
        paths: Any = None,
        callback: ChangeCallback | None = None,
    ) -> Any:
        """Watch the configured sources plus ``paths`` for changes.

        ``watch(callback)`` is accepted as shorthand for
        ``watch(None, callback)``. Must be called with a running event loop.

        Returns:
            Watch handle from the file source

        Raises:
            InvalidSrc: If extra paths are invalid
            InvalidCallback: If callback is not callable
        """
        if callback is None and callable(paths):
            paths, callback = None, paths
        if callback is not None and not callable(callback):
            raise InvalidCallback(f"Watch callback must be callable, got {type(callback).__name__}")

        watched = list(self._src)
        for path in normalize_paths(paths) if paths is not None else []:
            if path not in watched:
                watched.append(path)

        return self._source.watch(watched, callback or (lambda event, path: None))

    def log(self, message: str, level: Any = None, data: Any = None) -> "Engine":
        """Emit a ``log.<level>`` event.

        ``log(message, data)`` is accepted when the second argument is not
        a string. Level defaults to "debug".
        """
        if level is not None and not isinstance(level, str):
            level, data = data, level
        level = level or "debug"
        self.emit(f"log.{level}", message, data, level)
        return self

    # =========================================================================
    # State
    # =========================================================================

    def _target(self, name: str) -> Target:
        return self._files if name == "files" else self._components

    @property
    def version(self) -> str:
        """Installed partsmith version."""
        from partsmith import __version__

        return __version__

    @property
    def state(self) -> EngineState:
        """Results of the last parse of each lane."""
        return EngineState(files=self._files.state, components=self._components.state)

    @property
    def status(self) -> ParseStatus:
        return self._status

    @property
    def files(self) -> Target:
        """Files lane: plugins, methods and state."""
        return self._files

    @property
    def components(self) -> Target:
        """Components lane: plugins, methods and state."""
        return self._components

    @property
    def transformer(self) -> Transformer:
        return self._transformer

    @property
    def src(self) -> tuple[str, ...]:
        """Source paths in the order they were added."""
        return tuple(self._src)

    @property
    def source(self) -> Source:
        return self._source

    @property
    def commands(self) -> CommandRegistry:
        return self._commands

    @property
    def adapters(self) -> AdapterRegistry:
        return self._adapters
