"""testmap command line entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from testmap import __version__
from testmap.cli.components import register_components_parser
from testmap.cli.map import register_map_parser
from testmap.cli.prune import register_prune_parser
from testmap.cli.ux import error
from testmap.config.settings import get_settings
from testmap.core.errors import ConfigurationError, ExitCode, format_error_message
from testmap.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testmap",
        description="Map tests and CI job variants to owning components",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Log level (default: INFO)")
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Log renderer (default: json)",
    )
    subparsers = parser.add_subparsers(dest="command")

    for register in (register_map_parser, register_prune_parser, register_components_parser):
        subparser = register(subparsers)
        subparser.set_defaults(print_usage=subparser.print_usage)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "handler", None):
        parser.print_help()
        sys.exit(ExitCode.CONFIG_ERROR)

    # Settings load outside the commands' error handling.
    try:
        settings = get_settings()
        log_format = args.log_format or ("json" if settings.log_json else "console")
        configure_logging(args.log_level or settings.log_level, json_output=log_format == "json")
        code = args.handler(args)
    except ConfigurationError as e:
        error(format_error_message(e))
        code = e.exit_code

    if code == ExitCode.CONFIG_ERROR:
        args.print_usage()
    sys.exit(int(code))


if __name__ == "__main__":
    main()
