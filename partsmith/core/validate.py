"""Validation checks for the configuration API.

Each check raises a typed ConfigurationError synchronously and returns the
validated value, so callers can validate everything before mutating state.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from partsmith.core.collection import RESERVED_NAMES, is_reserved
from partsmith.core.errors import (
    InvalidAdapter,
    InvalidCallback,
    InvalidCommand,
    InvalidConfig,
    InvalidEntityType,
    InvalidExtension,
    InvalidMethod,
    InvalidPlugin,
    InvalidSrc,
    InvalidTransformer,
)
from partsmith.core.target import TARGETS
from partsmith.schemas.adapter import Adapter
from partsmith.schemas.command import Command
from partsmith.schemas.method import MethodDescriptor
from partsmith.schemas.options import EngineOptions


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    loc = ".".join(str(part) for part in errors[0]["loc"])
    return f"{loc}: {errors[0]['msg']}" if loc else errors[0]["msg"]


def config(options: Any) -> EngineOptions:
    """Validate engine options.

    Raises:
        InvalidConfig: If options is not a mapping or has a bad value
    """
    if not isinstance(options, Mapping):
        raise InvalidConfig(
            f"Configuration must be a mapping, got {type(options).__name__}"
        )
    try:
        return EngineOptions.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidConfig(f"Invalid configuration - {_first_error(e)}") from e


def src(path: Any) -> str:
    """Validate a normalized source path.

    Raises:
        InvalidSrc: If path is not a non-empty string
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidSrc(f"Source path must be a non-empty string, got {path!r}")
    return path


def method(name: Any, handler: Any) -> MethodDescriptor:
    """Validate a method name and handler.

    Raises:
        InvalidMethod: If the name is empty or malformed, or handler is not callable
    """
    try:
        descriptor = MethodDescriptor(name=name, handler=handler)
    except ValidationError as e:
        raise InvalidMethod(f"Invalid method {name!r} - {_first_error(e)}") from e
    if is_reserved(descriptor.name):
        raise InvalidMethod(
            f"Invalid method {name!r} - shadows a Collection attribute. "
            f"Reserved names: {sorted(RESERVED_NAMES)}"
        )
    return descriptor


def entity_type(target: Any) -> str:
    """Validate a target name.

    Raises:
        InvalidEntityType: If target is not one of the known targets
    """
    if target not in TARGETS:
        raise InvalidEntityType(
            f"Unknown target {target!r}. Available targets: {list(TARGETS)}"
        )
    return target


def plugin(fn: Any) -> Callable[..., Any]:
    """Validate a plugin function.

    Raises:
        InvalidPlugin: If fn is not callable
    """
    if not callable(fn):
        raise InvalidPlugin(f"Plugin must be callable, got {type(fn).__name__}")
    return fn


def extension(fn: Any) -> Callable[..., Any]:
    """Validate an extension function.

    Raises:
        InvalidExtension: If fn is not callable
    """
    if not callable(fn):
        raise InvalidExtension(f"Extension must be callable, got {type(fn).__name__}")
    return fn


def transformer(fn: Any) -> Callable[..., Any]:
    """Validate a transformer function.

    Raises:
        InvalidTransformer: If fn is not callable
    """
    if not callable(fn):
        raise InvalidTransformer(
            f"Transformer must be callable, got {type(fn).__name__}"
        )
    return fn


def callback(fn: Any) -> Callable[..., Any]:
    """Validate a parse callback.

    The callback must accept ``(err, components, files)``.

    Raises:
        InvalidCallback: If fn is not callable or cannot take three arguments
    """
    if not callable(fn):
        raise InvalidCallback(f"Callback must be callable, got {type(fn).__name__}")
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins); accept as-is.
        return fn
    try:
        signature.bind(None, None, None)
    except TypeError as e:
        raise InvalidCallback(
            f"Callback must accept (err, components, files), got {signature}"
        ) from e
    return fn


def adapter(descriptor: Any) -> Adapter:
    """Validate an adapter descriptor (mapping or Adapter).

    Raises:
        InvalidAdapter: If the descriptor is malformed
    """
    if isinstance(descriptor, Adapter):
        return descriptor
    if not isinstance(descriptor, Mapping):
        raise InvalidAdapter(
            f"Adapter must be a mapping or Adapter, got {type(descriptor).__name__}"
        )
    try:
        return Adapter.model_validate(dict(descriptor))
    except ValidationError as e:
        raise InvalidAdapter(f"Invalid adapter - {_first_error(e)}") from e


def command(descriptor: Any) -> Command:
    """Validate a command descriptor (mapping or Command).

    Raises:
        InvalidCommand: If the descriptor is malformed
    """
    if isinstance(descriptor, Command):
        return descriptor
    if not isinstance(descriptor, Mapping):
        raise InvalidCommand(
            f"Command must be a mapping or Command, got {type(descriptor).__name__}"
        )
    try:
        return Command.model_validate(dict(descriptor))
    except ValidationError as e:
        raise InvalidCommand(f"Invalid command - {_first_error(e)}") from e
