"""Entry transformation pipeline: strip, then filter, then map.

Nothing here validates paths. The output of `map` is arbitrary user data and
is checked by the materializer, never by the pipeline.
"""

from __future__ import annotations

import inspect
from typing import Any, List, Sequence

from .config import ExtractOptions
from .entry import Entry

CURRENT_DIR = "."


def strip_dirs(path: str, count: int) -> str:
    """Remove `count` leading slash-separated segments from `path`.

    Empty and `.` segments do not count. Returns `"."` when nothing is left.
    """
    if count <= 0:
        return path
    segments = [part for part in path.split("/") if part not in ("", CURRENT_DIR)]
    if len(segments) <= count:
        return CURRENT_DIR
    return "/".join(segments[count:])


def _strip(entries: Sequence[Entry], count: int) -> List[Entry]:
    if count <= 0:
        return list(entries)
    kept = []
    for entry in entries:
        entry.path = strip_dirs(entry.path, count)
        if entry.path != CURRENT_DIR:
            kept.append(entry)
    return kept


def apply_transforms(entries: Sequence[Entry], options: ExtractOptions) -> List[Entry]:
    """Synchronous pipeline; `filter` and `map` must return plain values."""
    result = _strip(entries, options.strip)

    if options.filter is not None:
        result = [entry for entry in result if options.filter(entry)]

    if options.map is not None:
        result = [options.map(entry) for entry in result]

    return result


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def apply_transforms_async(entries: Sequence[Entry], options: ExtractOptions) -> List[Entry]:
    """Pipeline variant that accepts coroutine `filter` / `map` callbacks."""
    result = _strip(entries, options.strip)

    if options.filter is not None:
        kept = []
        for entry in result:
            if await _resolve(options.filter(entry)):
                kept.append(entry)
        result = kept

    if options.map is not None:
        result = [await _resolve(options.map(entry)) for entry in result]

    return result


__all__ = ["apply_transforms", "apply_transforms_async", "strip_dirs", "CURRENT_DIR"]
