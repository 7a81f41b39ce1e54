"""Local filesystem source: reads file records and watches for changes.

Provides:
- Recursive, ordered reading of source directories into file records
- A polling watcher with its own start/stop lifecycle
"""

import asyncio
import inspect
import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from partsmith.config import settings
from partsmith.core.errors import SourceIOError
from partsmith.infra.logging import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[str, str], Any]
Signature = dict[str, tuple[int, int]]


@runtime_checkable
class Source(Protocol):
    """Protocol for file-source collaborators used by the engine."""

    async def read_all(self, paths: list[str]) -> list[Any]:
        """Read every record under ``paths``."""
        ...

    def watch(self, paths: list[str], on_change: ChangeCallback) -> Any:
        """Start watching ``paths`` and return a handle with ``stop()``."""
        ...


class FileSource:
    """Reads source paths from the local filesystem."""

    def __init__(
        self,
        include_hidden: bool | None = None,
        read_contents: bool | None = None,
        watch_interval: float | None = None,
    ) -> None:
        """Initialize file source.

        Args:
            include_hidden: Read dot-files. Defaults to settings.include_hidden.
            read_contents: Attach file bytes. Defaults to settings.read_contents.
            watch_interval: Polling interval. Defaults to settings.watch_interval.
        """
        self.include_hidden = settings.include_hidden if include_hidden is None else include_hidden
        self.read_contents = settings.read_contents if read_contents is None else read_contents
        self.watch_interval = watch_interval or settings.watch_interval

    def _is_hidden(self, relative: Path) -> bool:
        return any(part.startswith(".") for part in relative.parts)

    def _walk(self, root: Path) -> Iterator[Path]:
        """Yield files under ``root`` in sorted, depth-first order."""
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            if not self.include_hidden:
                dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if self.include_hidden or not self._is_hidden(path.relative_to(root)):
                    yield path

    def _files(self, paths: Iterable[str]) -> Iterator[tuple[Path, Path]]:
        for src in paths:
            root = Path(src)
            if root.is_file():
                yield root, root.parent
            elif root.is_dir():
                for path in self._walk(root):
                    yield path, root
            else:
                raise FileNotFoundError(f"Source path does not exist: {src}")

    def _record(self, path: Path, root: Path) -> dict[str, Any]:
        stat = path.stat()
        record: dict[str, Any] = {
            "path": str(path),
            "relative": path.relative_to(root).as_posix(),
            "root": str(root),
            "dir": str(path.parent),
            "base": path.name,
            "name": path.stem,
            "ext": path.suffix,
            "size": stat.st_size,
            "mtime": stat.st_mtime,
        }
        if self.read_contents:
            record["contents"] = path.read_bytes()
        return record

    def _read_all_sync(self, paths: list[str]) -> list[dict[str, Any]]:
        return [self._record(path, root) for path, root in self._files(paths)]

    async def read_all(self, paths: list[str]) -> list[dict[str, Any]]:
        """Read one record per file under ``paths``.

        Args:
            paths: Directories (read recursively) or individual files

        Returns:
            File records in source order, then sorted path order

        Raises:
            SourceIOError: If a path is missing or a file cannot be read
        """
        paths = list(paths)
        try:
            records = await asyncio.to_thread(self._read_all_sync, paths)
        except OSError as e:
            logger.error("Source read failed", paths=paths, error=str(e))
            raise SourceIOError(f"Failed to read sources: {e}", paths) from e

        logger.debug("Sources read", paths=paths, files=len(records))
        return records

    def scan(self, paths: Iterable[str]) -> Signature:
        """Modification signature of every file under ``paths``.

        Missing paths are skipped so a watcher survives deletions.
        """
        signature: Signature = {}
        for src in paths:
            if not Path(src).exists():
                continue
            for path, _ in self._files([src]):
                try:
                    stat = path.stat()
                except FileNotFoundError:
                    continue
                signature[str(path)] = (stat.st_mtime_ns, stat.st_size)
        return signature

    def watch(
        self,
        paths: list[str],
        on_change: ChangeCallback,
        interval: float | None = None,
    ) -> "WatchHandle":
        """Start watching ``paths``.

        Must be called with a running event loop.

        Returns:
            Started WatchHandle
        """
        handle = WatchHandle(self, paths, on_change, interval or self.watch_interval)
        return handle.start()


def diff_signatures(before: Signature, after: Signature) -> list[tuple[str, str]]:
    """Changes between two scans as ``(event, path)`` pairs, sorted by path."""
    changes: list[tuple[str, str]] = []
    for path in sorted(set(before) | set(after)):
        if path not in before:
            changes.append(("add", path))
        elif path not in after:
            changes.append(("unlink", path))
        elif before[path] != after[path]:
            changes.append(("change", path))
    return changes


class WatchHandle:
    """Polling watcher over a set of source paths.

    Calls ``on_change(event, path)`` once per detected change, where
    ``event`` is "add", "change" or "unlink". The callback may be async.
    """

    def __init__(
        self,
        source: FileSource,
        paths: list[str],
        on_change: ChangeCallback,
        interval: float,
    ) -> None:
        self.source = source
        self.paths = list(paths)
        self.on_change = on_change
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._signature: Signature = {}

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "WatchHandle":
        """Take the initial scan and start polling.

        Raises:
            SourceIOError: If there is no running event loop or the scan fails
        """
        if self.running:
            return self
        try:
            loop = asyncio.get_running_loop()
            self._signature = self.source.scan(self.paths)
        except (RuntimeError, OSError) as e:
            raise SourceIOError(f"Failed to start watching: {e}", self.paths) from e

        self._task = loop.create_task(self._run())
        logger.info("Watching sources", paths=self.paths, interval=self.interval)
        return self

    async def stop(self) -> None:
        """Stop polling. Safe to call more than once."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped watching sources", paths=self.paths)

    async def poll(self) -> list[tuple[str, str]]:
        """Rescan once and deliver changes since the previous scan."""
        current = await asyncio.to_thread(self.source.scan, self.paths)
        changes = diff_signatures(self._signature, current)
        self._signature = current
        for event, path in changes:
            result = self.on_change(event, path)
            if inspect.isawaitable(result):
                await result
        return changes

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.poll()
            except Exception as e:
                logger.error(
                    "Watch poll failed",
                    paths=self.paths,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    exc_info=True,
                )

    async def __aenter__(self) -> "WatchHandle":
        return self.start()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
