"""Normalized in-memory representation of one archive member."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class EntryType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    LINK = "link"
    SYMLINK = "symlink"

    def __str__(self) -> str:
        return self.value


def epoch() -> datetime:
    return datetime.fromtimestamp(0, tz=timezone.utc)


def mtime_from_timestamp(seconds: float) -> datetime:
    """UTC datetime for `seconds`, or the epoch when the platform cannot represent it."""
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return epoch()


@dataclass
class Entry:
    """One decoded archive member.

    `path` comes straight from the archive and is never trusted; the
    materializer decides where (and whether) it may land on disk.
    """

    path: str
    type: EntryType
    mode: int = 0
    mtime: datetime = field(default_factory=epoch)
    data: Optional[bytes] = None
    linkname: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = EntryType(self.type)
        if self.type is EntryType.FILE and self.data is None:
            self.data = b""

    @property
    def is_file(self) -> bool:
        return self.type is EntryType.FILE

    @property
    def is_directory(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @property
    def is_link(self) -> bool:
        return self.type is EntryType.LINK

    @property
    def is_symlink(self) -> bool:
        return self.type is EntryType.SYMLINK

    def timestamp(self) -> float:
        return self.mtime.timestamp()


__all__ = ["Entry", "EntryType", "epoch", "mtime_from_timestamp"]
