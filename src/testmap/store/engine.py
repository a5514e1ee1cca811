"""Warehouse engine construction."""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

from testmap.config.settings import Settings
from testmap.core.errors import ConfigurationError

logger = structlog.get_logger()


def resolve_database_url(settings: Settings) -> str:
    """
    Find the warehouse URL.

    An explicit ``database_url`` wins; otherwise the credentials file is read
    and must contain a ``database_url`` key.

    Raises:
        ConfigurationError: If no URL can be found
    """
    if settings.database_url:
        return settings.database_url

    if not settings.credentials_file:
        raise ConfigurationError("no warehouse database_url or credentials_file configured")

    path = Path(settings.credentials_file)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"could not read credentials file: {e}", details={"path": str(path)}
        ) from e

    url = data.get("database_url") if isinstance(data, dict) else None
    if not url:
        raise ConfigurationError(
            "credentials file has no database_url", details={"path": str(path)}
        )
    return url


def create_warehouse_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the warehouse."""
    url = resolve_database_url(settings)
    safe_url = make_url(url).render_as_string(hide_password=True)
    logger.debug("creating_warehouse_engine", url=safe_url)
    return create_engine(url, future=True, pool_pre_ping=True)
