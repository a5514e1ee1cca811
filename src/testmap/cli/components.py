"""
CLI command for inspecting the component registry.

Commands:
    testmap components                      - List registered components
    testmap components --catalog-dir rules  - Include YAML catalog components
    testmap components --format json        - Output as JSON
"""

from __future__ import annotations

import argparse

from testmap.cli.ux import console, error, header, print_table
from testmap.core.errors import (
    ExitCode,
    TestMapError,
    format_error_message,
    main_with_error_handling,
)
from testmap.ownership.registry import ComponentRegistry, default_registry


def describe_registry(registry: ComponentRegistry) -> list[dict[str, object]]:
    """Summaries of every component, sorted by name."""
    summaries = []
    for component in sorted(registry, key=lambda c: c.name):
        summaries.append(
            {
                "name": component.name,
                "jira_project": component.jira_project(),
                "jira_components": component.jira_components(),
                "variants": component.identify_variants(),
            }
        )
    return summaries


@main_with_error_handling()
def components_command(catalog_dir: str | None = None, output_format: str = "table") -> int:
    """List the components that can claim tests."""
    try:
        registry = default_registry(catalog_dir)
    except TestMapError as e:
        error(format_error_message(e))
        raise

    summaries = describe_registry(registry)
    if output_format == "json":
        console.print_json(data=summaries)
        return ExitCode.SUCCESS

    header(f"Components ({len(summaries)})")
    rows = [
        [
            str(s["name"]),
            ", ".join(s["jira_components"]),  # type: ignore[arg-type]
            ", ".join(s["variants"]) or "-",  # type: ignore[arg-type]
        ]
        for s in summaries
    ]
    print_table("", ["Component", "JIRA components", "Variants"], rows)
    return ExitCode.SUCCESS


def register_components_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Register components subcommand parser."""
    parser = subparsers.add_parser("components", help="List registered ownership components")
    parser.add_argument("--catalog-dir", help="Directory or file of extra YAML components")
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.set_defaults(handler=handle_components_command)
    return parser


def handle_components_command(args: argparse.Namespace) -> int:
    """Handle components command from CLI args."""
    return components_command(
        catalog_dir=getattr(args, "catalog_dir", None),
        output_format=getattr(args, "output_format", "table"),
    )
