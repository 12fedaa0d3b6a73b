"""
routecov.cli - Command-line interface.

Main entry point for the routecov CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from routecov import __version__
from routecov.commands import coverage, tree


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="routecov",
        description="Route coverage for message-routing pipelines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  routecov coverage                         # Report coverage for all routes
  routecov coverage --fail-on-error         # Fail if a route is not fully covered
  routecov coverage --includes '*Route.py'  # Only scan matching files
  routecov coverage -j                      # Output JSON for tooling
  routecov tree src/app/routes.py           # Show the step tree of a file

Configuration:
  Settings are read from .routecov.toml in the base directory or a parent.

For detailed command help: routecov <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"routecov {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
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

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # coverage command
    coverage_parser = subparsers.add_parser(
        "coverage",
        help="Correlate routes with runtime dumps and report coverage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Patterns:
  --includes and --excludes take comma-separated wildcard or regular
  expression patterns. A file matches when its path relative to a source
  or resource root, or its bare file name, matches. Excludes win.

Exit status:
  0 unless --fail-on-error is set and a route with a route id has a step
  that never ran.
""",
    )
    coverage_parser.add_argument(
        "--base-dir",
        type=Path,
        help="Project base directory (default: config file directory or cwd)",
        metavar="PATH",
    )
    coverage_parser.add_argument(
        "--dump-dir",
        type=Path,
        help="Directory with runtime dump files, relative to base dir",
        metavar="PATH",
    )
    coverage_parser.add_argument(
        "--includes",
        help="Comma-separated file patterns to include",
        metavar="PATTERNS",
    )
    coverage_parser.add_argument(
        "--excludes",
        help="Comma-separated file patterns to exclude (takes precedence)",
        metavar="PATTERNS",
    )
    coverage_parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Fail if a route is not fully covered",
    )
    coverage_parser.add_argument(
        "--include-test",
        action="store_true",
        help="Also scan test sources and test resources",
    )
    coverage_parser.add_argument(
        "--no-nested",
        action="store_true",
        help="Skip route classes declared inside other classes",
    )
    coverage_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the report as JSON",
    )

    # tree command
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the route trees defined in files",
    )
    tree_parser.add_argument(
        "files",
        nargs="+",
        help="Python or XML files to read",
        metavar="FILE",
    )
    tree_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Spaces per tree level (default: 2)",
    )
    tree_parser.add_argument(
        "--no-nested",
        action="store_true",
        help="Skip route classes declared inside other classes",
    )
    tree_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the trees as JSON",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install routecov[completion]
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "coverage":
            return coverage.run(args)
        elif args.command == "tree":
            return tree.run(args)
        elif args.command == "version":
            return version_command(args)
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


def version_command(args: argparse.Namespace) -> int:
    """Print the installed version."""
    print(f"routecov {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
