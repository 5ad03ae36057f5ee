"""
Custom exception classes for safe-decompress.
"""


class SafeDecompressError(Exception):
    """Base exception class for safe-decompress errors."""
    pass


class InvalidInputError(SafeDecompressError, TypeError):
    """Raised when the archive source is neither a path nor raw bytes."""
    pass


class PathEscapeError(SafeDecompressError):
    """Raised when an entry would resolve outside the output root."""
    pass


class SymlinkWriteRefusedError(SafeDecompressError):
    """Raised when a regular file would be written through a symlink."""
    pass


class DecodeError(SafeDecompressError):
    """Raised when a plugin recognized the archive but could not decode it."""
    pass
