"""
archiclaw.cli - Command-line interface.

Main entry point for the archiclaw CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from archiclaw import __version__
from archiclaw.commands import bundle, config_cmd, ids_cmd, query_cmd, serve, validate
from archiclaw.core.ids import EntityType
from archiclaw.core.rules import IssueCode


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="archiclaw",
        description="Enterprise architecture landscape tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  archiclaw validate                   # Validate the landscape
  archiclaw validate --json            # Validation report as JSON
  archiclaw bundle -o dist/data.json   # Write the JSON bundle
  archiclaw query app FIN-APP-001      # Show one application passport
  archiclaw query search payments      # Search all entity kinds
  archiclaw id next FIN APP            # Allocate the next application ID
  archiclaw serve --port 8080          # Read-only JSON API

Configuration:
  archiclaw config path                # Show config file location
  archiclaw config show                # View all settings

For detailed command help: archiclaw <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"archiclaw {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--landscape",
        type=Path,
        help="Override landscape directory",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate schemas, ids, references and sequence counters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Issue codes (for --skip-code):
  FileNotFound          Required file missing
  SchemaViolation       Invalid YAML or schema mismatch
  DuplicateIdentifier   Same id defined twice
  PlacementMismatch     Folder name differs from declared id
  UnresolvedReference   Reference to an unknown application (warning)
  SequenceExceeded      Id beyond its sequence counter
""",
    )
    validate_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the validation report as JSON",
    )
    validate_parser.add_argument(
        "--skip-code",
        action="append",
        choices=[code.value for code in IssueCode],
        help="Drop issues with this code (can be repeated)",
        metavar="CODE",
    )

    # bundle command
    bundle_parser = subparsers.add_parser(
        "bundle",
        help="Write the landscape as one JSON bundle",
    )
    bundle_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Bundle path (default: [bundle] output)",
        metavar="PATH",
    )

    # query command
    query_parser = subparsers.add_parser(
        "query",
        help="Look up landscape records (JSON output)",
    )
    query_parser.add_argument(
        "--bundle",
        type=Path,
        help="Read from a JSON bundle instead of the landscape directory",
        metavar="PATH",
    )
    query_subparsers = query_parser.add_subparsers(dest="query_action")

    query_app = query_subparsers.add_parser("app", help="Show an application passport")
    query_app.add_argument("app_id", help="Application ID (e.g. FIN-APP-001)")

    query_domain = query_subparsers.add_parser("domain", help="Show a domain definition")
    query_domain.add_argument("domain_id", help="Domain code (case-insensitive)")

    for name, help_text in (
        ("apps", "Applications of a domain"),
        ("capabilities", "Capabilities of a domain"),
        ("entities", "Data entities of a domain"),
    ):
        by_domain = query_subparsers.add_parser(name, help=help_text)
        by_domain.add_argument("domain_id", help="Domain code (case-insensitive)")

    query_integrations = query_subparsers.add_parser(
        "integrations", help="Integrations of an application, or between two"
    )
    query_integrations.add_argument("app_id", help="Application ID")
    query_integrations.add_argument("other_id", nargs="?", help="Second application ID")

    query_changes = query_subparsers.add_parser(
        "changes", help="Change requests referencing an application"
    )
    query_changes.add_argument("app_id", help="Application ID")

    query_search = query_subparsers.add_parser("search", help="Full-text search")
    query_search.add_argument("text", help="Case-insensitive substring")

    query_subparsers.add_parser("summary", help="Record counts")

    # id command
    id_parser = subparsers.add_parser(
        "id",
        help="Allocate identifiers and show sequence counters",
    )
    id_subparsers = id_parser.add_subparsers(dest="id_action")
    id_next = id_subparsers.add_parser("next", help="Allocate the next ID")
    id_next.add_argument("domain", help="Domain code (e.g. FIN)")
    id_next.add_argument(
        "type",
        type=str.upper,
        choices=[t.value for t in EntityType],
        help="Entity type",
    )
    id_next.add_argument(
        "--check-concurrent",
        action="store_true",
        help="Fail if the counter changes while allocating",
    )
    id_subparsers.add_parser("show", help="Show all sequence counters")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="View and modify configuration (path, show, get, set)",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("path", help="Show path to configuration file")
    config_show = config_subparsers.add_parser("show", help="Show current configuration")
    config_show.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    config_get = config_subparsers.add_parser("get", help="Get a configuration value")
    config_get.add_argument("key", help="Dotted key (e.g. rules.skip_codes)")
    config_set = config_subparsers.add_parser("set", help="Set a configuration value")
    config_set.add_argument("key", help="Dotted key (e.g. server.port)")
    config_set.add_argument("value", help="Value (true/false, numbers and JSON are parsed)")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the landscape as a read-only JSON API",
    )
    serve_parser.add_argument("--host", help="Bind address (default: [server] host)")
    serve_parser.add_argument(
        "--port", type=int, help="Port (default: [server] port)"
    )

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Set up root logging from -v/-q; commands apply [logging] level later."""
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args)

    try:
        # Dispatch to command handlers
        if args.command == "validate":
            return validate.run(args)
        elif args.command == "bundle":
            return bundle.run(args)
        elif args.command == "query":
            return query_cmd.run(args)
        elif args.command == "id":
            return ids_cmd.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        elif args.command == "serve":
            return serve.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
