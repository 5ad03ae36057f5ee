"""Registry for CLI subcommands."""

from .extract_command import ExtractCommand
from .list_command import ListCommand

COMMANDS = (
    ExtractCommand,
    ListCommand,
)

__all__ = ["COMMANDS", "ExtractCommand", "ListCommand"]
