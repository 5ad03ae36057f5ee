"""Bundled decoder plugins.

`default_plugins()` returns the set tried for every input, in order:
tar, tar+bzip2, tar+gzip, zip.
"""

from typing import List, Optional

from ..constants import EXTRACTABLE_TYPES
from .base import ArchivePlugin
from .tar import TarBz2Plugin, TarGzPlugin, TarPlugin
from .zip import ZipPlugin

PLUGINS = (
    TarPlugin,
    TarBz2Plugin,
    TarGzPlugin,
    ZipPlugin,
)


def default_plugins() -> List[ArchivePlugin]:
    return [plugin() for plugin in PLUGINS]


def can_extract(name: str, mime: Optional[str] = None) -> bool:
    """Guess from a file name (or MIME type) whether it is a supported archive.

    Purely informational: extraction always sniffs the bytes.
    """
    candidates = [name] + ([mime] if mime else [])
    for candidate in candidates:
        candidate = (candidate or "").lower()
        if any(candidate.endswith(kind) for kind in EXTRACTABLE_TYPES):
            return True
    return False


__all__ = [
    "ArchivePlugin",
    "PLUGINS",
    "TarPlugin",
    "TarBz2Plugin",
    "TarGzPlugin",
    "ZipPlugin",
    "can_extract",
    "default_plugins",
]
