"""Arguments shared by commands that talk to the warehouse."""

from __future__ import annotations

import argparse
from typing import Any

from testmap.config.settings import MODES, Settings, load_settings

# argparse dest -> Settings field
_SETTING_ARGS = {
    "mode": "mode",
    "database_url": "database_url",
    "credentials_file": "credentials_file",
    "junit_table": "junit_table",
    "test_mapping_table": "test_mapping_table",
    "variant_mapping_table": "variant_mapping_table",
    "data_dir": "data_dir",
    "push": "push",
    "map_variants": "map_variants",
    "workers": "workers",
    "jira_url": "jira_url",
    "jira_project": "jira_project",
    "catalog_dir": "catalog_dir",
    "obsolete_tests_file": "obsolete_tests_file",
    "query_timeout": "query_timeout_seconds",
}


def add_warehouse_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=MODES,
        help="local reads the tests snapshot and never writes to the warehouse (default: local)",
    )
    parser.add_argument("--database-url", help="Warehouse SQLAlchemy URL (or TESTMAP_DATABASE_URL)")
    parser.add_argument("--credentials-file", help="YAML file holding the warehouse database_url")
    parser.add_argument("--table-mapping", dest="test_mapping_table", help="Test mapping table")
    parser.add_argument(
        "--table-variant-mapping", dest="variant_mapping_table", help="Variant mapping table"
    )
    parser.add_argument("--query-timeout", type=float, help="Seconds a list or prune query may run")


def settings_from_args(args: argparse.Namespace) -> Settings:
    """
    Settings with explicitly passed flags taking precedence.

    Raises:
        ConfigurationError: If a flag or environment value is invalid
    """
    overrides: dict[str, Any] = {}
    for dest, field in _SETTING_ARGS.items():
        value = getattr(args, dest, None)
        if value is not None:
            overrides[field] = value
    return load_settings(**overrides)
