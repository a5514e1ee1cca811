"""
CLI command for mapping tests and job variants to components.

Commands:
    testmap map                                   - Map tests from the local snapshot
    testmap map --mode=warehouse --push           - Map and push a new generation
    testmap map --map-variants --format json      - Include variants, JSON summary
"""

from __future__ import annotations

import argparse

from testmap.cli.options import add_warehouse_arguments, settings_from_args
from testmap.cli.ux import console, error, print_table, success
from testmap.config.settings import Settings
from testmap.core.errors import (
    ExitCode,
    TestMapError,
    format_error_message,
    main_with_error_handling,
)
from testmap.pipeline import MapResult, run_map


@main_with_error_handling()
def map_command(settings: Settings, output_format: str = "table") -> int:
    """
    Map tests (and optionally variants) to their owning components.

    Exit codes:
        0 - Success
        10 - Invalid flags or settings
        11 - Warehouse or JIRA failure
        13 - Ownership conflict
        14 - Tests could not be identified
    """
    try:
        result = run_map(settings)
    except TestMapError as e:
        error(format_error_message(e))
        raise

    if output_format == "json":
        console.print_json(data=result.to_dict())
    else:
        _print_summary(result)
    return ExitCode.SUCCESS


def _print_summary(result: MapResult) -> None:
    rows = [[key.replace("_", " "), str(value)] for key, value in result.to_dict().items()]
    print_table("Mapping summary", ["", "Count"], rows)
    success(f"mapped {len(result.tests)} tests")


def register_map_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Register map subcommand parser."""
    parser = subparsers.add_parser(
        "map",
        help="Map tests and job variants to component ownership",
    )
    add_warehouse_arguments(parser)
    parser.add_argument("--table-junit", dest="junit_table", help="Table storing junit results")
    parser.add_argument("--data-dir", help="Directory for JSON snapshots (default: data)")
    parser.add_argument(
        "--push",
        action="store_const",
        const=True,
        help="Push the new records to the warehouse (requires --mode=warehouse)",
    )
    parser.add_argument(
        "--map-variants",
        action="store_const",
        const=True,
        help="Map job variants to JIRA projects and components",
    )
    parser.add_argument("--workers", type=int, help="Threads used to resolve tests (default: 1)")
    parser.add_argument("--jira-url", help="JIRA server for component IDs (or TESTMAP_JIRA_URL)")
    parser.add_argument("--jira-project", help="JIRA project key (default: OCPBUGS)")
    parser.add_argument("--catalog-dir", help="Directory or file of extra YAML components")
    parser.add_argument("--obsolete-tests-file", help="YAML list of obsolete test names")
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.set_defaults(handler=handle_map_command)
    return parser


def handle_map_command(args: argparse.Namespace) -> int:
    """Handle map command from CLI args."""
    return map_command(
        settings_from_args(args),
        output_format=getattr(args, "output_format", "table"),
    )
