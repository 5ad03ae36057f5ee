"""Turn transformed entries into filesystem state."""

from __future__ import annotations

import asyncio
import os
import time
from typing import Optional

from .entry import Entry
from .errors import PathEscapeError
from .logging_config import get_logger
from .safepath import (
    PathLike,
    destination_for,
    ensure_not_symlink,
    ensure_safe_dir,
    is_absolute,
    is_within,
    prepare_root,
    real_path,
)

_log = get_logger(__name__)

_WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)


def current_umask() -> int:
    """Read the process umask (there is no getter, so set and restore it)."""
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _restore_mtime(path: str, entry: Entry) -> None:
    os.utime(path, (time.time(), entry.timestamp()))


def _write_file(destination: str, entry: Entry, umask: int) -> None:
    mode = entry.mode & ~umask
    fd = os.open(destination, _WRITE_FLAGS, mode)
    with os.fdopen(fd, "wb") as handle:
        handle.write(entry.data or b"")
        # open() only applies the mode when it creates the file
        if os.chmod in os.supports_fd:
            os.chmod(handle.fileno(), mode)


def _link_source(base_dir: str, linkname: Optional[str], output: PathLike, real_root: str) -> str:
    if not linkname:
        raise PathEscapeError("Link entry has no target")
    if is_absolute(linkname):
        raise PathEscapeError(f"Refusing absolute link target: {linkname!r}")
    source = os.path.normpath(os.path.join(base_dir, linkname))
    if not is_within(os.path.abspath(source), os.path.abspath(output)):
        raise PathEscapeError(f"Refusing to link to a file outside the output path: {linkname}")
    if not is_within(real_path(source), real_root):
        raise PathEscapeError(f"Refusing to link to a file outside the output path: {linkname}")
    return source


def _hard_link(source: str, destination: str) -> None:
    try:
        os.link(source, destination, follow_symlinks=False)
    except FileExistsError:
        if not os.path.samefile(source, destination):
            raise
        _log.debug("Hard link %s already present", destination)


def _symlink(linkname: str, destination: str) -> None:
    try:
        os.symlink(linkname, destination)
    except FileExistsError:
        if not os.path.islink(destination) or os.readlink(destination) != linkname:
            raise
        _log.debug("Symlink %s already present", destination)


def materialize_entry(
    entry: Entry,
    output: PathLike,
    umask: Optional[int] = None,
    symlinks_as_hardlinks: bool = False,
) -> Entry:
    """Create the file, directory or link described by `entry` under `output`.

    Raises PathEscapeError / SymlinkWriteRefusedError for hostile entries and
    lets OSError from the filesystem propagate unchanged.
    """
    if umask is None:
        umask = current_umask()

    real_root = prepare_root(output)
    destination = destination_for(output, entry.path)

    if entry.is_directory:
        ensure_safe_dir(destination, real_root)
        _restore_mtime(destination, entry)
        _log.debug("Extracted directory %s", entry.path)
        return entry

    parent = os.path.dirname(destination)
    ensure_safe_dir(parent, real_root)

    if entry.is_file:
        ensure_not_symlink(destination)
        _write_file(destination, entry, umask)
        _restore_mtime(destination, entry)
        _log.debug("Extracted file %s (%d bytes)", entry.path, len(entry.data or b""))
        return entry

    if entry.is_link:
        # Hard link targets are archive paths, relative to the output root
        _hard_link(_link_source(os.fspath(output), entry.linkname, output, real_root), destination)
        _log.debug("Extracted hard link %s -> %s", entry.path, entry.linkname)
        return entry

    if symlinks_as_hardlinks:
        _log.warning("Symlinks unsupported; creating hard link for %s -> %s", entry.path, entry.linkname)
        _hard_link(_link_source(parent, entry.linkname, output, real_root), destination)
        return entry

    _symlink(entry.linkname or "", destination)
    _log.debug("Extracted symlink %s -> %s", entry.path, entry.linkname)
    return entry


async def materialize(
    entry: Entry,
    output: PathLike,
    umask: Optional[int] = None,
    symlinks_as_hardlinks: bool = False,
) -> Entry:
    """Run `materialize_entry` off the event loop."""
    return await asyncio.to_thread(materialize_entry, entry, output, umask, symlinks_as_hardlinks)


def restore_directory_mtime(entry: Entry, output: PathLike) -> None:
    """Reapply a directory entry's mtime once nothing else will be written into it."""
    real_root = real_path(output)
    resolved = real_path(destination_for(output, entry.path))
    if not is_within(resolved, real_root):
        raise PathEscapeError(f"Refusing to touch a directory outside the output path: {entry.path}")
    _restore_mtime(resolved, entry)


__all__ = ["current_umask", "materialize", "materialize_entry", "restore_directory_mtime"]
