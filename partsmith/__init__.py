"""Partsmith - two-stage plugin engine for files and components.

Reads source files, runs them through a configurable chain of plugins,
transforms them into components and exposes both as queryable collections.
"""

__version__ = "0.4.0"

from partsmith.core.collection import Collection
from partsmith.core.engine import Engine, EngineState, ParseResult, ParseStatus
from partsmith.core.errors import (
    ConfigurationError,
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
    PartsmithError,
    PipelineError,
    SourceIOError,
)

__all__ = [
    "__version__",
    "Collection",
    "Engine",
    "EngineState",
    "ParseResult",
    "ParseStatus",
    "PartsmithError",
    "ConfigurationError",
    "InvalidAdapter",
    "InvalidCallback",
    "InvalidCommand",
    "InvalidConfig",
    "InvalidEntityType",
    "InvalidExtension",
    "InvalidMethod",
    "InvalidPlugin",
    "InvalidSrc",
    "InvalidTransformer",
    "PipelineError",
    "SourceIOError",
]
