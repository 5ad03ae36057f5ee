"""Tar decoders: plain, gzip and bzip2 compressed."""

from __future__ import annotations

import bz2
import gzip
import io
import stat
import tarfile
import zlib
from typing import List, Optional

from ..constants import Signatures
from ..entry import Entry, EntryType, mtime_from_timestamp
from ..errors import DecodeError
from .base import ArchivePlugin


def is_tar(data: bytes) -> bool:
    end = Signatures.TAR_OFFSET + len(Signatures.TAR)
    return len(data) >= end and bytes(data[Signatures.TAR_OFFSET:end]) == Signatures.TAR


def _entry_type(member: tarfile.TarInfo) -> Optional[EntryType]:
    if member.isreg():
        return EntryType.FILE
    if member.isdir():
        return EntryType.DIRECTORY
    if member.islnk():
        return EntryType.LINK
    if member.issym():
        return EntryType.SYMLINK
    return None


class TarPlugin(ArchivePlugin):
    """Plain (uncompressed) tar archives."""

    name = "tar"
    signature = Signatures.TAR
    signature_offset = Signatures.TAR_OFFSET

    def decode(self, data: bytes) -> List[Entry]:
        return self._read_tar(data)

    def _read_tar(self, data: bytes) -> List[Entry]:
        entries: List[Entry] = []
        try:
            with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as archive:
                for member in archive:
                    entry_type = _entry_type(member)
                    if entry_type is None:
                        self.logger.warning("Skipping unsupported tar member %r", member.name)
                        continue
                    entries.append(self._to_entry(archive, member, entry_type))
        except (tarfile.TarError, EOFError) as exc:
            raise DecodeError(f"Malformed {self.name} archive: {exc}") from exc
        return entries

    @staticmethod
    def _to_entry(archive: tarfile.TarFile, member: tarfile.TarInfo, entry_type: EntryType) -> Entry:
        data = None
        linkname = None
        if entry_type is EntryType.FILE:
            handle = archive.extractfile(member)
            data = handle.read() if handle is not None else b""
        elif entry_type in (EntryType.LINK, EntryType.SYMLINK):
            linkname = member.linkname

        return Entry(
            path=member.name,
            type=entry_type,
            mode=stat.S_IMODE(member.mode),
            mtime=mtime_from_timestamp(member.mtime),
            data=data,
            linkname=linkname,
        )


class _CompressedTarPlugin(TarPlugin):
    """Decompress first, then read the payload as a tar if it is one."""

    def _decompress(self, data: bytes) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes) -> List[Entry]:
        try:
            payload = self._decompress(data)
        except (OSError, EOFError, ValueError, zlib.error) as exc:
            raise DecodeError(f"Malformed {self.name} stream: {exc}") from exc

        if not is_tar(payload):
            self.logger.debug("%s payload is not a tar archive; ignoring", self.name)
            return []
        return self._read_tar(payload)


class TarGzPlugin(_CompressedTarPlugin):
    """gzip compressed tar archives (.tar.gz / .tgz)."""

    name = "tar.gz"
    signature = Signatures.GZIP
    signature_offset = 0

    def _decompress(self, data: bytes) -> bytes:
        return gzip.decompress(bytes(data))


class TarBz2Plugin(_CompressedTarPlugin):
    """bzip2 compressed tar archives (.tar.bz2 / .tbz2)."""

    name = "tar.bz2"
    signature = Signatures.BZIP2
    signature_offset = 0

    def _decompress(self, data: bytes) -> bytes:
        return bz2.decompress(bytes(data))


__all__ = ["TarPlugin", "TarGzPlugin", "TarBz2Plugin", "is_tar"]
