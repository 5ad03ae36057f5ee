"""Extract command handling for the safe-decompress CLI."""

from safe_decompress.cli_helpers import add_strip_argument, fail
from safe_decompress.config import DecompressSettings
from safe_decompress.extract import extract_sync


class ExtractCommand:
    """Extracts an archive into an output directory."""

    @staticmethod
    def add_parser(subparsers, settings: DecompressSettings) -> None:
        """Add extract command parser to subparsers."""
        parser = subparsers.add_parser('extract', help='Extract an archive into a directory')
        parser.add_argument('archive', help='Path to the archive')
        parser.add_argument('output', help='Directory to extract into')
        add_strip_argument(parser, settings)
        parser.add_argument('--symlinks-as-hardlinks', action='store_true',
                            help='Create hard links instead of symbolic links')
        parser.set_defaults(func=ExtractCommand.execute, settings=settings)

    @staticmethod
    def execute(args) -> None:
        """Run the extraction and print one line per entry."""
        downgrade = True if args.symlinks_as_hardlinks else args.settings.symlinks_as_hardlinks
        try:
            entries = extract_sync(
                args.archive,
                args.output,
                strip=args.strip,
                symlinks_as_hardlinks=downgrade,
            )
        except Exception as exc:
            fail(exc)
            return

        for entry in entries:
            print(f"{entry.type.value:<9} {entry.path}")
