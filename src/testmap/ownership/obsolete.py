"""Classification of tests that staff have approved as obsolete."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import structlog
import yaml

from testmap.core.errors import ConfigurationError
from testmap.models import TestInfo

logger = structlog.get_logger()


class ObsoleteTestManager(Protocol):
    def is_obsolete(self, test: TestInfo) -> bool: ...


class StaticObsoleteTestManager:
    """Marks tests obsolete by exact name."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self.names = frozenset(names)

    def is_obsolete(self, test: TestInfo) -> bool:
        return test.name in self.names

    @classmethod
    def from_file(cls, path: str | Path) -> StaticObsoleteTestManager:
        """
        Load obsolete test names from a YAML list.

        Raises:
            ConfigurationError: If the file is missing or not a list of names
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or []
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"could not read obsolete tests file: {e}", details={"path": str(path)}
            ) from e

        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ConfigurationError(
                "obsolete tests file must be a list of test names", details={"path": str(path)}
            )

        logger.debug("loaded_obsolete_tests", path=str(path), tests=len(data))
        return cls(data)
