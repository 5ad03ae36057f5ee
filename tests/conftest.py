"""Test configuration helpers: stable temp directory on WSL and archive builders."""

from __future__ import annotations

import io
import os
import platform
import sys
import tarfile
import tempfile
import zipfile
from typing import Iterable, List, Optional

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from safe_decompress.entry import Entry  # noqa: E402

MTIME = 1_600_000_000


def _is_wsl() -> bool:
    release = platform.release().lower()
    version = platform.version().lower()
    return "microsoft" in release or "microsoft" in version


if _is_wsl() and os.path.isdir("/tmp"):
    os.environ["TMPDIR"] = "/tmp"
    os.environ["TEMP"] = "/tmp"
    os.environ["TMP"] = "/tmp"
    tempfile.tempdir = "/tmp"


def build_tar(members: Iterable[dict], compression: str = "") -> bytes:
    """Build a tar archive in memory.

    Each member is a dict with `name` and optional `type` (file, dir, link,
    symlink), `data`, `linkname`, `mode` and `mtime`.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=f"w:{compression}", format=tarfile.GNU_FORMAT) as archive:
        for member in members:
            kind = member.get("type", "file")
            info = tarfile.TarInfo(member["name"])
            info.mtime = member.get("mtime", MTIME)
            payload = None
            if kind == "file":
                payload = member.get("data", b"")
                info.size = len(payload)
                info.mode = member.get("mode", 0o644)
            elif kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = member.get("mode", 0o755)
            elif kind == "link":
                info.type = tarfile.LNKTYPE
                info.linkname = member["linkname"]
                info.mode = member.get("mode", 0o644)
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = member["linkname"]
                info.mode = member.get("mode", 0o777)
            elif kind == "fifo":
                info.type = tarfile.FIFOTYPE
                info.mode = member.get("mode", 0o644)
            archive.addfile(info, io.BytesIO(payload) if payload is not None else None)
    return buffer.getvalue()


def build_zip(members: Iterable[dict]) -> bytes:
    """Build a zip archive in memory (same member dicts as `build_tar`)."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for member in members:
            kind = member.get("type", "file")
            name = member["name"]
            if kind == "dir" and not name.endswith("/"):
                name += "/"
            info = zipfile.ZipInfo(name, date_time=member.get("date_time", (2020, 1, 2, 3, 4, 6)))
            info.create_system = 3
            if kind == "symlink":
                info.external_attr = (0o120000 | 0o777) << 16
                archive.writestr(info, member["linkname"])
            elif kind == "dir":
                info.external_attr = ((0o040000 | member.get("mode", 0o755)) << 16) | 0x10
                archive.writestr(info, b"")
            else:
                mode = member.get("mode", 0o644)
                info.external_attr = ((0o100000 | mode) << 16) if mode else 0
                archive.writestr(info, member.get("data", b""))
    return buffer.getvalue()


class StaticPlugin:
    """Decoder plugin returning a fixed list of entries, for hostile inputs."""

    def __init__(self, entries: List[Entry]):
        self.entries = entries
        self.calls = 0

    def __call__(self, data: bytes, options: Optional[object] = None) -> List[Entry]:
        self.calls += 1
        return list(self.entries)


@pytest.fixture
def make_tar():
    return build_tar


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def static_plugin():
    return StaticPlugin


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def outside_dir(tmp_path):
    path = tmp_path / "outside"
    path.mkdir()
    return path
