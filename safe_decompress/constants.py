"""
Constants and exit codes for safe-decompress.
"""


class ExitCodes:
    """Exit codes for different error conditions."""
    OK = 0
    INVALID_INPUT = 1
    PATH_ESCAPE = 2
    SYMLINK_WRITE_REFUSED = 3
    DECODE_FAILURE = 4
    IO_FAILURE = 5


class Signatures:
    """Magic numbers sniffed by the decoder plugins."""
    TAR = b"ustar"
    TAR_OFFSET = 257
    GZIP = b"\x1f\x8b\x08"
    BZIP2 = b"BZh"
    ZIP = b"PK\x03\x04"
    ZIP_EMPTY = b"PK\x05\x06"


# Environment variables
LOG_LEVEL_ENV = "SAFE_DECOMPRESS_LOG_LEVEL"
STRIP_ENV = "SAFE_DECOMPRESS_STRIP"
SYMLINKS_AS_HARDLINKS_ENV = "SAFE_DECOMPRESS_SYMLINKS_AS_HARDLINKS"

# Modes applied to zip members that carry no unix permission bits
DEFAULT_DIRECTORY_MODE = 0o755
DEFAULT_FILE_MODE = 0o644

# Name / MIME table used by can_extract()
EXTRACTABLE_TYPES = (
    ".zip",
    ".tar",
    ".tar.gz",
    ".tgz",
    ".tar.bz2",
    ".tbz2",
    "application/zip",
    "application/x-tar",
    "application/gzip",
    "application/x-tgz",
    "application/x-bzip2",
)
