"""List command handling for the safe-decompress CLI."""

from safe_decompress.cli_helpers import add_strip_argument, fail
from safe_decompress.config import DecompressSettings
from safe_decompress.extract import extract_sync


class ListCommand:
    """Lists archive entries without writing anything."""

    @staticmethod
    def add_parser(subparsers, settings: DecompressSettings) -> None:
        parser = subparsers.add_parser('list', help='List archive entries (dry run)')
        parser.add_argument('archive', help='Path to the archive')
        add_strip_argument(parser, settings)
        parser.set_defaults(func=ListCommand.execute)

    @staticmethod
    def execute(args) -> None:
        try:
            entries = extract_sync(args.archive, strip=args.strip)
        except Exception as exc:
            fail(exc)
            return

        for entry in entries:
            target = f" -> {entry.linkname}" if entry.linkname else ""
            print(f"{entry.type.value:<9} {entry.mode:04o} {entry.path}{target}")
