"""
Application settings using Pydantic.

Provides environment-based configuration loading with TESTMAP_ prefix.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from testmap.core.errors import ConfigurationError

MODE_LOCAL = "local"
MODE_WAREHOUSE = "warehouse"
MODES = (MODE_LOCAL, MODE_WAREHOUSE)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TESTMAP_",
    )

    # Run mode
    mode: str = MODE_LOCAL
    push: bool = False
    map_variants: bool = False
    workers: int = 1

    # Warehouse
    database_url: str | None = None
    credentials_file: str | None = None
    query_timeout_seconds: float | None = None

    # Tables
    junit_table: str = "junit"
    test_mapping_table: str = "component_mapping"
    variant_mapping_table: str = "variant_mapping"

    # Local snapshots
    data_dir: Path = Path("data")

    # JIRA
    jira_url: str | None = None
    jira_token: str | None = None
    jira_project: str = "OCPBUGS"
    http_timeout: float = 30.0

    # Component catalogs and obsolete tests
    catalog_dir: Path | None = None
    obsolete_tests_file: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


def load_settings(**overrides: Any) -> Settings:
    """
    Build settings from the environment, `.env` and explicit overrides.

    Raises:
        ConfigurationError: If any value fails validation
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            f"invalid settings: {'; '.join(errors)}", details={"errors": errors}
        ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()


def validate_run_mode(settings: Settings) -> None:
    """
    Reject invalid mode/flag combinations before any work begins.

    Raises:
        ConfigurationError: With a message that points at the right flag
    """
    has_credentials = bool(settings.database_url or settings.credentials_file)

    if settings.mode == MODE_WAREHOUSE:
        if not has_credentials:
            raise ConfigurationError(
                "please supply warehouse credentials, or use --mode=local",
                details={"mode": settings.mode},
            )
    elif settings.mode == MODE_LOCAL:
        if settings.push:
            raise ConfigurationError(
                "cannot push to the warehouse in --mode=local",
                details={"mode": settings.mode},
            )
        if has_credentials:
            raise ConfigurationError(
                "warehouse credentials not required for local mode, "
                "maybe you meant to specify --mode=warehouse",
                details={"mode": settings.mode},
            )
    else:
        raise ConfigurationError(
            f"invalid mode, must be one of: {', '.join(MODES)}. got: {settings.mode!r}",
            details={"mode": settings.mode},
        )

    if settings.workers < 1:
        raise ConfigurationError(
            "workers must be at least 1", details={"workers": settings.workers}
        )
