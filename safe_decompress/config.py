"""Configuration for safe-decompress.

Two layers:
* `DecompressSettings` - process-wide defaults sourced from the environment
    - `SAFE_DECOMPRESS_LOG_LEVEL`
    - `SAFE_DECOMPRESS_STRIP`
    - `SAFE_DECOMPRESS_SYMLINKS_AS_HARDLINKS`
* `ExtractOptions` - per-call options (strip / filter / map / plugins)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from .constants import LOG_LEVEL_ENV, STRIP_ENV, SYMLINKS_AS_HARDLINKS_ENV
from .entry import Entry

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

EntryFilter = Callable[[Entry], Union[bool, Awaitable[bool]]]
EntryMap = Callable[[Entry], Union[Entry, Awaitable[Entry]]]


def env_optional_bool(key: str, environ: Optional[Mapping[str, str]] = None) -> Optional[bool]:
    """Parse a boolean flag, keeping "unset" (or unrecognised) distinct as None."""
    value = (environ if environ is not None else os.environ).get(key)
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


def env_int(key: str, default: int, environ: Optional[Mapping[str, str]] = None) -> int:
    value = (environ if environ is not None else os.environ).get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def platform_lacks_symlinks() -> bool:
    """Windows cannot create symlinks without special privileges."""
    return os.name == "nt"


@dataclass
class DecompressSettings:
    """Typed settings sourced from the environment."""

    log_level: str
    strip: int
    symlinks_as_hardlinks: Optional[bool]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DecompressSettings":
        env = environ if environ is not None else os.environ
        return cls(
            log_level=(env.get(LOG_LEVEL_ENV) or "INFO").upper(),
            strip=max(env_int(STRIP_ENV, 0, env), 0),
            symlinks_as_hardlinks=env_optional_bool(SYMLINKS_AS_HARDLINKS_ENV, env),
        )


@dataclass
class ExtractOptions:
    """Per-call extraction options.

    Attributes:
        strip: Number of leading path segments removed from every entry
        filter: Predicate; entries for which it is falsy are dropped
        map: Transform applied last; its result is what gets written
        plugins: Ordered decoder plugins, None for the default set
        symlinks_as_hardlinks: Create hard links instead of symlinks.
            None picks the platform default.
    """

    strip: int = 0
    filter: Optional[EntryFilter] = None
    map: Optional[EntryMap] = None
    plugins: Optional[Sequence[Any]] = None
    symlinks_as_hardlinks: Optional[bool] = None

    def __post_init__(self) -> None:
        if isinstance(self.strip, bool) or not isinstance(self.strip, int):
            raise ValueError(f"strip must be a non-negative integer, got {self.strip!r}")
        if self.strip < 0:
            raise ValueError(f"strip must be a non-negative integer, got {self.strip!r}")

    @classmethod
    def build(cls, options: Optional["ExtractOptions"] = None, **overrides: Any) -> "ExtractOptions":
        """Return `options` (or defaults) with `overrides` applied."""
        if options is None:
            return cls(**overrides)
        if overrides:
            return replace(options, **overrides)
        return options

    def downgrade_symlinks(self) -> bool:
        if self.symlinks_as_hardlinks is None:
            return platform_lacks_symlinks()
        return self.symlinks_as_hardlinks


__all__ = [
    "DecompressSettings",
    "ExtractOptions",
    "env_int",
    "env_optional_bool",
    "platform_lacks_symlinks",
]
