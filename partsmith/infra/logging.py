"""Structured logging configuration using structlog.

Provides JSON-formatted or console logs, and a bridge that forwards an
engine's ``log.<level>`` events into structlog.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any, Protocol

import structlog
from structlog.types import Processor

from partsmith.config import settings

_LEVEL_METHODS = {
    "debug": "debug",
    "info": "info",
    "warn": "warning",
    "warning": "warning",
    "error": "error",
    "critical": "critical",
}


class _Emitter(Protocol):
    def on(self, event: str, listener: Callable[..., Any]) -> Any: ...

    def off(self, event: str, listener: Callable[..., Any]) -> Any: ...


def setup_logging() -> None:
    """Configure structlog for the library.

    Sets up:
    - JSON formatting when ``log_json`` is enabled outside dev
    - Console formatting for development
    - Integration with standard logging
    """
    use_json = settings.log_json and settings.environment != "dev"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if use_json:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelName(settings.log_level.upper()),
    )

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)
        **initial_context: Initial context to bind to the logger

    Returns:
        Bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def forward_engine_logs(
    engine: _Emitter,
    logger: Any | None = None,
) -> Callable[[], None]:
    """Re-emit an engine's ``log.<level>`` events through structlog.

    Args:
        engine: Anything with ``on``/``off`` event registration (an Engine)
        logger: Logger to write to. Defaults to a ``partsmith.engine`` logger.

    Returns:
        Callable that detaches the forwarder
    """
    target = logger or get_logger("partsmith.engine")

    def _forward(message: str, data: Any = None, level: str = "debug") -> None:
        method = getattr(target, _LEVEL_METHODS.get(str(level).lower(), "info"))
        if data is None:
            method(message)
        else:
            method(message, data=data)

    engine.on("log.*", _forward)

    def _detach() -> None:
        engine.off("log.*", _forward)

    return _detach
