"""safe-decompress - archive extraction that stays inside its output directory.

Provides:
* `extract` / `extract_sync` - decode zip, tar, tar.gz and tar.bz2 input and
  materialize it under an output root, refusing path escapes and writes
  through symlinks
* Strip / filter / map entry transforms (`ExtractOptions`)
* Pluggable format decoders (`safe_decompress.plugins`)
* Thin CLI wrapper (`safe-decompress`)
"""

from ._version import __version__
from .config import DecompressSettings, ExtractOptions
from .entry import Entry, EntryType
from .errors import (
    DecodeError,
    InvalidInputError,
    PathEscapeError,
    SafeDecompressError,
    SymlinkWriteRefusedError,
)
from .extract import extract, extract_sync
from .logging_config import configure_logging
from .plugins import ArchivePlugin, can_extract, default_plugins

__all__ = [
    "__version__",
    "ArchivePlugin",
    "DecodeError",
    "DecompressSettings",
    "Entry",
    "EntryType",
    "ExtractOptions",
    "InvalidInputError",
    "PathEscapeError",
    "SafeDecompressError",
    "SymlinkWriteRefusedError",
    "can_extract",
    "configure_logging",
    "default_plugins",
    "extract",
    "extract_sync",
]
