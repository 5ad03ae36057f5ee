"""Decoder plugin interface.

A plugin is any callable `(data, options) -> list[Entry]` (or an awaitable of
one). `ArchivePlugin` is the stock implementation: it sniffs a signature and
only then hands the bytes to `decode`.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any, List, Optional

from ..entry import Entry
from ..logging_config import get_logger


class ArchivePlugin(metaclass=ABCMeta):
    """Base class for the bundled format recognizers."""

    # Human readable format name, used in logs
    name: str = ""
    # Magic number and the offset it is expected at
    signature: bytes = b""
    signature_offset: int = 0

    def __init__(self) -> None:
        self.logger = get_logger(f"safe_decompress.plugins.{self.name or type(self).__name__}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def matches(self, data: bytes) -> bool:
        """Check the magic number at `signature_offset`."""
        end = self.signature_offset + len(self.signature)
        return len(data) >= end and bytes(data[self.signature_offset:end]) == self.signature

    def attempt_decode(self, data: bytes) -> List[Entry]:
        """Decode `data` if it is in this plugin's format, else return []."""
        if not self.matches(data):
            return []
        entries = self.decode(data)
        self.logger.debug("Decoded %d %s entries", len(entries), self.name)
        return entries

    def __call__(self, data: bytes, options: Optional[Any] = None) -> List[Entry]:
        return self.attempt_decode(data)

    @abstractmethod
    def decode(self, data: bytes) -> List[Entry]:
        """Decode recognized bytes; raise DecodeError if they are malformed."""
        return []
