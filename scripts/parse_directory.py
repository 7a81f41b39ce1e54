#!/usr/bin/env python
"""Parse source directories and print the resulting records.

Builds an engine over one or more directories, optionally groups files
into components by directory, and prints both record sets as JSON.

Usage:
    # Files only (components are empty with the default transformer)
    python scripts/parse_directory.py ./patterns

    # One component per directory
    python scripts/parse_directory.py ./patterns --group-by-dir

    # Keep watching and reparse on every change
    python scripts/parse_directory.py ./patterns --group-by-dir --watch
"""

import argparse
import asyncio
import json
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any

from partsmith import Engine, PartsmithError
from partsmith.infra.file_source import FileSource
from partsmith.infra.logging import forward_engine_logs, setup_logging


def group_by_dir(files: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Transformer producing one component per directory."""
    grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for file in files:
        grouped[file["dir"]].append(file)
    return [
        {
            "name": Path(directory).name,
            "dir": directory,
            "files": [file["relative"] for file in members],
        }
        for directory, members in sorted(grouped.items())
    ]


def summarize(file: dict[str, Any]) -> dict[str, Any]:
    """Drop file bytes so records print as JSON."""
    return {key: value for key, value in file.items() if key != "contents"}


async def parse_and_print(engine: Engine, output: Path | None) -> int:
    """Run one parse and print or save the result."""
    try:
        components, files = await engine.parse()
    except PartsmithError as e:
        print(f"Parse failed: {type(e).__name__}: {e}")
        return 1

    result = {
        "files": [summarize(file) for file in files],
        "components": components.to_json(),
    }

    print(f"\n{'='*60}")
    print(f"Files:      {len(files)}")
    print(f"Components: {len(components)}")
    print(f"{'='*60}\n")

    text = json.dumps(result, indent=2, default=str)
    if output:
        output.write_text(text)
        print(f"Result saved to: {output}")
    else:
        print(text)
    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Parse source directories with partsmith",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "src",
        nargs="+",
        type=Path,
        help="Source directories or files",
    )
    parser.add_argument(
        "--group-by-dir",
        action="store_true",
        help="Produce one component per directory",
    )
    parser.add_argument(
        "--include-hidden",
        action="store_true",
        help="Read dot-files",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Reparse whenever a source file changes (Ctrl+C to stop)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Save result JSON to file",
    )

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging()

    for src in args.src:
        if not src.exists():
            print(f"Error: Source not found: {src}")
            return 1

    engine = Engine(
        {"src": [str(src) for src in args.src]},
        source=FileSource(include_hidden=args.include_hidden, read_contents=False),
    )
    forward_engine_logs(engine)
    if args.group_by_dir:
        engine.set_transformer(group_by_dir)

    exit_code = await parse_and_print(engine, args.output)
    if not args.watch:
        return exit_code

    async def on_change(event: str, path: str) -> None:
        print(f"\n{event}: {path}")
        await parse_and_print(engine, args.output)

    handle = engine.watch(on_change)
    try:
        while handle.running:
            await asyncio.sleep(1)
    finally:
        await handle.stop()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
