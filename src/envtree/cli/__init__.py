"""CLI entry point for envtree.

Provides command-line interface for:
- Resolving a schema against the environment and printing the tree
- Validating the environment (exit code 1 names the bad variable)
- Describing the environment variables a schema reads
- Listing available schemas
- Displaying version information

Usage:
    envtree resolve -s database
    envtree resolve -s database -e staging.yaml --format json
    envtree validate -s database
    envtree describe -s database
    envtree schemas list
    envtree version
"""

import argparse
import logging
import sys
from typing import List, Optional

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _add_schema_arguments(parser: argparse.ArgumentParser, env_file: bool = True) -> None:
    parser.add_argument(
        "-s", "--schema",
        default="database",
        help="Schema name or module:attribute reference (default: database)",
    )
    if env_file:
        parser.add_argument(
            "-e", "--env-file",
            help="YAML environment file overlaid on the process environment",
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="envtree",
        description="Typed configuration trees from environment variables",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a schema and print the configuration tree",
    )
    _add_schema_arguments(resolve_parser)
    resolve_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    resolve_parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print passwords and keys unmasked",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the environment against a schema",
    )
    _add_schema_arguments(validate_parser)

    # describe command
    describe_parser = subparsers.add_parser(
        "describe",
        help="List the environment variables a schema reads",
    )
    _add_schema_arguments(describe_parser, env_file=False)

    # schemas command
    schemas_parser = subparsers.add_parser(
        "schemas",
        help="Manage schemas",
    )
    schemas_subparsers = schemas_parser.add_subparsers(
        dest="schemas_command",
        help="Schema commands",
    )
    schemas_subparsers.add_parser(
        "list",
        help="List available schemas",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Handle --version flag at top level
    if args.version:
        from envtree.cli.commands.version import cmd_version
        return cmd_version()

    if args.command is None:
        parser.print_help()
        return 0

    # Dispatch to command handlers
    if args.command == "resolve":
        from envtree.cli.commands.resolve import cmd_resolve
        return cmd_resolve(
            schema_name=args.schema,
            env_file=args.env_file,
            output_format=args.format,
            show_secrets=args.show_secrets,
        )

    elif args.command == "validate":
        from envtree.cli.commands.validate import cmd_validate
        return cmd_validate(
            schema_name=args.schema,
            env_file=args.env_file,
        )

    elif args.command == "describe":
        from envtree.cli.commands.describe import cmd_describe
        return cmd_describe(schema_name=args.schema)

    elif args.command == "schemas":
        if args.schemas_command == "list":
            from envtree.cli.commands.schemas import cmd_schemas_list
            return cmd_schemas_list()
        else:
            # Show schemas help
            parser.parse_args(["schemas", "--help"])
            return 0

    elif args.command == "version":
        from envtree.cli.commands.version import cmd_version
        return cmd_version()

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
