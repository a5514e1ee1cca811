"""
Test corpus providers and local JSON snapshots.

The test list comes either from the junit results table in the warehouse
or from a snapshot file a previous warehouse run wrote. Mapping results are
snapshotted the same way, one pretty-printed JSON array per record type.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import structlog
from sqlalchemy import Engine, column, select, table
from sqlalchemy.exc import SQLAlchemyError

from testmap.core.errors import ConfigurationError, StoreError
from testmap.models import TestInfo

logger = structlog.get_logger()


class TestSource(Protocol):
    __test__ = False

    def list_tests(self) -> list[TestInfo]: ...


class LocalTestSource:
    """Reads the test list from a JSON snapshot."""

    __test__ = False

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def list_tests(self) -> list[TestInfo]:
        try:
            data = json.loads(self.path.read_text())
        except OSError as e:
            raise ConfigurationError(
                "could not fetch tests from file, run once with --mode=warehouse to create it",
                details={"path": str(self.path)},
            ) from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"could not parse tests from file: {e}", details={"path": str(self.path)}
            ) from e

        try:
            tests = [TestInfo.from_dict(item) for item in data or []]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(
                "malformed tests snapshot, expected a list of {name, suite} objects",
                details={"path": str(self.path)},
            ) from e
        logger.info("tests_loaded", source=str(self.path), tests=len(tests))
        return tests


class WarehouseTestSource:
    """Lists distinct tests from the junit results table."""

    __test__ = False

    def __init__(self, engine: Engine, table_name: str = "junit") -> None:
        self.engine = engine
        self.table_name = table_name

    def list_tests(self) -> list[TestInfo]:
        junit = table(self.table_name, column("test_name"), column("testsuite"))
        query = (
            select(junit.c.test_name, junit.c.testsuite)
            .where(junit.c.test_name.is_not(None), junit.c.test_name != "")
            .distinct()
            .order_by(junit.c.test_name, junit.c.testsuite)
        )

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            raise StoreError(
                f"could not list tests from {self.table_name}: {e}",
                details={"table": self.table_name},
            ) from e

        tests = [TestInfo(name=name, suite=suite or "") for name, suite in rows]
        logger.info("tests_loaded", source=self.table_name, tests=len(tests))
        return tests


def write_records(records: Sequence[Any], path: str | Path) -> None:
    """
    Overwrite ``path`` with the records as a 2-space indented JSON array.

    Records are serialized with their ``to_dict()`` method.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [record.to_dict() for record in records]
    path.write_text(json.dumps(payload, indent=2) + "\n")
    logger.info("records_written", path=str(path), records=len(payload))
