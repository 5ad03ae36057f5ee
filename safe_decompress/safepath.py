"""Safe path resolution and symlink write guards.

Every directory on the way to an extracted entry is created ancestor-first,
and each one's real (symlink-free) path is checked against the output root
before anything is created beneath it.
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, Union

from .entry import Entry
from .errors import PathEscapeError, SymlinkWriteRefusedError
from .logging_config import get_logger

_log = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class DirState(Enum):
    CREATED = "created"
    EXISTED = "existed"


def make_dir(path: PathLike) -> DirState:
    """Create a single directory, treating a concurrent creation as success."""
    try:
        os.mkdir(path)
    except FileExistsError:
        if not os.path.isdir(path):
            raise
        return DirState.EXISTED
    return DirState.CREATED


def real_path(path: PathLike) -> str:
    """Fully resolved path; raises FileNotFoundError if it does not exist."""
    return str(Path(path).resolve(strict=True))


def is_within(path: PathLike, root: PathLike) -> bool:
    candidate = Path(path)
    base = Path(root)
    return candidate == base or base in candidate.parents


def prepare_root(output: PathLike) -> str:
    """Create the output root if needed and return its real path."""
    os.makedirs(output, exist_ok=True)
    return real_path(output)


def is_absolute(entry_path: str) -> bool:
    return posixpath.isabs(entry_path) or ntpath.isabs(entry_path) or bool(ntpath.splitdrive(entry_path)[0])


def destination_for(output: PathLike, entry_path: str) -> str:
    """Join an untrusted entry path under `output`.

    Absolute paths (POSIX or drive qualified) and `..` segments are rejected
    outright; symlink based escapes are left to `ensure_safe_dir`.
    """
    if "\0" in entry_path:
        raise PathEscapeError(f"Null byte in entry path: {entry_path!r}")
    if is_absolute(entry_path):
        raise PathEscapeError(f"Refusing absolute entry path: {entry_path!r}")

    parts = PurePosixPath(entry_path.replace("\\", "/")).parts
    if ".." in parts:
        raise PathEscapeError(f"Refusing entry path with parent reference: {entry_path!r}")

    return os.path.normpath(os.path.join(os.fspath(output), *parts))


def ensure_safe_dir(directory: PathLike, real_root: PathLike) -> str:
    """Make sure `directory` exists inside `real_root`; return its real path.

    Missing ancestors are created first, each one verified before the next
    level is trusted. Raises PathEscapeError on the first level whose real
    path is not under the root.
    """
    directory = os.fspath(directory)
    try:
        resolved = real_path(directory)
    except FileNotFoundError:
        parent = os.path.dirname(directory)
        if not parent or parent == directory:
            raise
        resolved = ensure_safe_dir(parent, real_root)

    if not is_within(resolved, real_root):
        raise PathEscapeError(f"Refusing to create a directory outside the output path: {directory}")

    if make_dir(directory) is DirState.CREATED:
        _log.debug("Created directory %s", directory)

    resolved = real_path(directory)
    if not is_within(resolved, real_root):
        raise PathEscapeError(f"Refusing to write outside output directory: {resolved}")
    return resolved


def ensure_not_symlink(destination: PathLike) -> None:
    """Refuse to write a regular file over an existing symlink."""
    if os.path.islink(destination):
        raise SymlinkWriteRefusedError(f"Refusing to write into a symlink: {os.fspath(destination)}")


def refuse_writes_through_symlinks(entries: Iterable[Entry]) -> None:
    """Reject archives that write a file at or beneath one of their own symlinks.

    Runs over the whole (transformed) entry list before anything touches the
    disk, so the outcome does not depend on materialization order.
    """
    entries = list(entries)
    symlinks = {
        PurePosixPath(entry.path.replace("\\", "/"))
        for entry in entries
        if entry.is_symlink
    }
    if not symlinks:
        return

    for entry in entries:
        if not entry.is_file:
            continue
        target = PurePosixPath(entry.path.replace("\\", "/"))
        for link in symlinks:
            if target == link or link in target.parents:
                raise SymlinkWriteRefusedError(
                    f"Refusing to write {entry.path!r} through archive symlink {str(link)!r}"
                )


__all__ = [
    "DirState",
    "destination_for",
    "ensure_not_symlink",
    "ensure_safe_dir",
    "is_absolute",
    "is_within",
    "make_dir",
    "prepare_root",
    "real_path",
    "refuse_writes_through_symlinks",
]
