"""Zip decoder."""

from __future__ import annotations

import io
import stat
import zipfile
import zlib
from datetime import datetime
from typing import List

from ..constants import DEFAULT_DIRECTORY_MODE, DEFAULT_FILE_MODE, Signatures
from ..entry import Entry, EntryType, epoch
from ..errors import DecodeError
from .base import ArchivePlugin

# MS-DOS directory attribute, set by archivers that do not record unix modes
_DOS_DIRECTORY = 0x10


def _zip_mtime(date_time: tuple) -> datetime:
    """Local wall-clock time from a DOS timestamp; zeroed month or day fields become 1."""
    year, month, day, hour, minute, second = date_time
    try:
        return datetime(year, max(month, 1), max(day, 1), hour, minute, second)
    except ValueError:
        return epoch()


def _entry_type(info: zipfile.ZipInfo, mode: int) -> EntryType:
    if stat.S_ISLNK(mode):
        return EntryType.SYMLINK
    if stat.S_ISDIR(mode) or info.is_dir():
        return EntryType.DIRECTORY
    if info.create_system == 0 and info.external_attr == _DOS_DIRECTORY:
        return EntryType.DIRECTORY
    return EntryType.FILE


class ZipPlugin(ArchivePlugin):
    """Zip archives, including symlinks stored with unix mode bits."""

    name = "zip"
    signature = Signatures.ZIP
    signature_offset = 0

    def matches(self, data: bytes) -> bool:
        return super().matches(data) or bytes(data[:4]) == Signatures.ZIP_EMPTY

    def decode(self, data: bytes) -> List[Entry]:
        entries: List[Entry] = []
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                for info in archive.infolist():
                    entries.append(self._to_entry(archive, info))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError) as exc:
            raise DecodeError(f"Malformed zip archive: {exc}") from exc
        return entries

    @staticmethod
    def _to_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Entry:
        raw_mode = (info.external_attr >> 16) & 0xFFFF
        entry_type = _entry_type(info, raw_mode)

        mode = stat.S_IMODE(raw_mode)
        if mode == 0:
            mode = DEFAULT_DIRECTORY_MODE if entry_type is EntryType.DIRECTORY else DEFAULT_FILE_MODE

        data = None
        linkname = None
        if entry_type is EntryType.FILE:
            data = archive.read(info)
        elif entry_type is EntryType.SYMLINK:
            linkname = archive.read(info).decode("utf-8", errors="surrogateescape")

        path = info.filename
        if entry_type is EntryType.DIRECTORY:
            path = path.rstrip("/") or path

        return Entry(
            path=path,
            type=entry_type,
            mode=mode,
            mtime=_zip_mtime(info.date_time),
            data=data,
            linkname=linkname,
        )


__all__ = ["ZipPlugin"]
