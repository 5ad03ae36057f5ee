"""
Command Line Interface for safe-decompress.

Provides `extract` and `list` commands on top of the library API.
"""

import argparse
import sys
from typing import List, Optional

from ._version import __version__
from .cli_commands import COMMANDS
from .config import DecompressSettings
from .constants import ExitCodes
from .logging_config import configure_logging, get_logger


def create_parser(settings: Optional[DecompressSettings] = None) -> argparse.ArgumentParser:
    """Create the main argument parser."""
    settings = settings or DecompressSettings.from_env()
    parser = argparse.ArgumentParser(
        prog='safe-decompress',
        description='Extract zip and tar archives without letting entries escape the output directory'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', default=settings.log_level,
                        help='Logging level (default: SAFE_DECOMPRESS_LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    for command in COMMANDS:
        command.add_parser(subparsers, settings)

    return parser


def main(args: Optional[List[str]] = None) -> None:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)
    """
    settings = DecompressSettings.from_env()
    parser = create_parser(settings)

    if args is None:
        args = sys.argv[1:]

    # If no arguments provided, show help
    if not args:
        parser.print_help()
        sys.exit(ExitCodes.OK)

    parsed_args = parser.parse_args(args)
    configure_logging(parsed_args.log_level)
    get_logger(__name__).debug("Running %s with %s", parsed_args.command, settings)

    if hasattr(parsed_args, 'func'):
        parsed_args.func(parsed_args)
    else:
        parser.print_help()
        sys.exit(ExitCodes.OK)


if __name__ == '__main__':
    main()
