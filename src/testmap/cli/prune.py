"""
CLI command for pruning superseded mapping generations.

Commands:
    testmap prune --mode=warehouse    - Delete all but the newest generation
"""

from __future__ import annotations

import argparse

from testmap.cli.options import add_warehouse_arguments, settings_from_args
from testmap.cli.ux import console, error, print_table, success, warning
from testmap.config.settings import Settings
from testmap.core.errors import (
    ExitCode,
    TestMapError,
    format_error_message,
    main_with_error_handling,
)
from testmap.pipeline import run_prune


@main_with_error_handling()
def prune_command(settings: Settings, output_format: str = "table") -> int:
    """
    Prune both mapping tables.

    Exit codes:
        0 - Success
        1 - At least one table could not be pruned yet, retry later
        10 - Invalid flags or settings
        11 - Warehouse failure
    """
    try:
        results = run_prune(settings)
    except TestMapError as e:
        error(format_error_message(e))
        raise

    if output_format == "json":
        console.print_json(
            data={
                table: {"deleted": r.deleted, "deferred": r.deferred}
                for table, r in results.items()
            }
        )
    else:
        rows = [
            [table, str(r.deleted), "yes" if r.deferred else "no"] for table, r in results.items()
        ]
        print_table("Prune results", ["Table", "Deleted", "Deferred"], rows)

    if any(r.deferred for r in results.values()):
        warning("some tables were modified recently; wait 90 minutes and prune again")
        return ExitCode.WARNING

    success("pruned mapping tables")
    return ExitCode.SUCCESS


def register_prune_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Register prune subcommand parser."""
    parser = subparsers.add_parser(
        "prune",
        help="Delete mapping rows older than the newest generation",
    )
    add_warehouse_arguments(parser)
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.set_defaults(handler=handle_prune_command)
    return parser


def handle_prune_command(args: argparse.Namespace) -> int:
    """Handle prune command from CLI args."""
    return prune_command(
        settings_from_args(args),
        output_format=getattr(args, "output_format", "table"),
    )
