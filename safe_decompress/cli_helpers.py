"""Shared CLI helpers for safe-decompress commands."""

import sys
from typing import Optional

from .config import DecompressSettings
from .constants import ExitCodes
from .errors import (
    DecodeError,
    InvalidInputError,
    PathEscapeError,
    SymlinkWriteRefusedError,
)


def exit_with_error(message: str, exit_code: int) -> None:
    """Print an error message and exit with the specified code."""
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(exit_code)


def map_exception_to_exit_code(exc: Exception) -> Optional[int]:
    """Translate known exceptions to safe-decompress exit codes."""
    if isinstance(exc, InvalidInputError):
        return ExitCodes.INVALID_INPUT
    if isinstance(exc, PathEscapeError):
        return ExitCodes.PATH_ESCAPE
    if isinstance(exc, SymlinkWriteRefusedError):
        return ExitCodes.SYMLINK_WRITE_REFUSED
    if isinstance(exc, DecodeError):
        return ExitCodes.DECODE_FAILURE
    if isinstance(exc, OSError):
        return ExitCodes.IO_FAILURE
    return None


def add_strip_argument(parser, settings: DecompressSettings) -> None:
    parser.add_argument('--strip', type=int, default=settings.strip, metavar='N',
                        help='Remove N leading path segments from every entry')


def fail(exc: Exception) -> None:
    """Report an extraction failure and exit with the mapped code."""
    exit_code = map_exception_to_exit_code(exc)
    if isinstance(exc, PathEscapeError):
        message = f"Archive tried to escape the output directory: {exc}"
    elif isinstance(exc, SymlinkWriteRefusedError):
        message = f"Archive tried to write through a symlink: {exc}"
    elif isinstance(exc, DecodeError):
        message = f"Could not decode archive: {exc}"
    elif isinstance(exc, ValueError):
        message = f"Invalid option: {exc}"
        exit_code = ExitCodes.INVALID_INPUT
    else:
        message = str(exc)

    if exit_code is None:
        exit_code = ExitCodes.IO_FAILURE

    exit_with_error(message, exit_code)
