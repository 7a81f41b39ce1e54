"""Infrastructure - file source, logging."""

from partsmith.infra.file_source import FileSource, Source, WatchHandle
from partsmith.infra.logging import forward_engine_logs, get_logger, setup_logging

__all__ = [
    "FileSource",
    "Source",
    "WatchHandle",
    "forward_engine_logs",
    "get_logger",
    "setup_logging",
]
