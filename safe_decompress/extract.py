"""Top-level extraction: read, decode, transform, materialize."""

from __future__ import annotations

import asyncio
import inspect
import os
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from .config import ExtractOptions
from .entry import Entry
from .errors import InvalidInputError
from .logging_config import get_logger
from .materialize import current_umask, materialize, restore_directory_mtime
from .plugins import default_plugins
from .safepath import PathLike, refuse_writes_through_symlinks
from .transform import apply_transforms_async

_log = get_logger(__name__)

Source = Union[str, "os.PathLike[str]", bytes, bytearray, memoryview]


def _check_source(source: Any) -> None:
    if isinstance(source, (str, os.PathLike, bytes, bytearray, memoryview)):
        return
    raise InvalidInputError(f"Input file required: expected a path or bytes, got {type(source).__name__}")


async def read_input(source: Source) -> bytes:
    """Load the whole archive into memory."""
    _check_source(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    return await asyncio.to_thread(Path(source).read_bytes)


async def run_plugins(data: bytes, plugins: Sequence[Any], options: ExtractOptions) -> List[Entry]:
    """Offer `data` to every plugin in order and concatenate the results."""
    entries: List[Entry] = []
    for plugin in plugins:
        result = plugin(data, options)
        if inspect.isawaitable(result):
            result = await result
        if result:
            entries.extend(result)
    return entries


async def _materialize_all(entries: Iterable[Entry], output: PathLike, umask: int, downgrade: bool) -> None:
    # Let every entry finish before reporting the first failure, in entry order
    results = await asyncio.gather(
        *(materialize(entry, output, umask, downgrade) for entry in entries),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result


def _restore_directory_mtimes(directories: Iterable[Entry], output: PathLike) -> None:
    for entry in directories:
        restore_directory_mtime(entry, output)


async def extract(
    source: Source,
    output: Optional[PathLike] = None,
    options: Optional[ExtractOptions] = None,
    **overrides: Any,
) -> List[Entry]:
    """Extract `source` (a path or raw bytes) into `output`.

    Without `output` (or with an empty one) nothing is written and the
    decoded, transformed entry list is returned (dry run). `options` may also
    be passed in place of `output`, as in ``await extract(data, options)``.
    Keyword arguments override fields of `options`, e.g.
    ``await extract(data, "out", strip=1)``.

    Raises:
        InvalidInputError: `source` is neither a path nor bytes
        PathEscapeError: An entry resolves outside `output`
        SymlinkWriteRefusedError: A file would be written through a symlink
        DecodeError: A recognized archive is malformed
        OSError: Any filesystem failure
    """
    _check_source(source)
    if isinstance(output, ExtractOptions):
        if options is not None:
            raise InvalidInputError("Options passed both in place of the output path and as `options`")
        output, options = None, output
    if not output:
        output = None
    options = ExtractOptions.build(options, **overrides)
    plugins = options.plugins if options.plugins is not None else default_plugins()

    data = await read_input(source)
    entries = await run_plugins(data, plugins, options)
    entries = await apply_transforms_async(entries, options)

    if output is None:
        _log.debug("Dry run: %d entries decoded", len(entries))
        return entries

    refuse_writes_through_symlinks(entries)

    # Links go last so their targets already exist.
    plain = [entry for entry in entries if not (entry.is_link or entry.is_symlink)]
    links = [entry for entry in entries if entry.is_link or entry.is_symlink]
    umask = current_umask()
    downgrade = options.downgrade_symlinks()
    await _materialize_all(plain, output, umask, downgrade)
    await _materialize_all(links, output, umask, downgrade)
    # Children bump their parent's mtime, so directories are stamped last
    await asyncio.to_thread(_restore_directory_mtimes, [entry for entry in plain if entry.is_directory], output)

    _log.info("Extracted %d entries into %s", len(entries), os.fspath(output))
    return entries


def extract_sync(
    source: Source,
    output: Optional[PathLike] = None,
    options: Optional[ExtractOptions] = None,
    **overrides: Any,
) -> List[Entry]:
    """Blocking wrapper around `extract` for callers without an event loop."""
    return asyncio.run(extract(source, output, options, **overrides))


__all__ = ["extract", "extract_sync", "read_input", "run_plugins"]
