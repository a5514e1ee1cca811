"""
Versioned mapping tables.

Mapping tables are append-only: every push writes a new generation of
rows stamped with the run's ``created_at``. A ``<table>_latest`` view
exposes, per identity, the rows of the newest generation. Pruning removes
every generation older than the newest one in the table.

The manager assumes a single writer per table and run; no locking is done.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

import structlog
from sqlalchemy import Connection, Engine, and_, delete, func, insert, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError

from testmap.core.errors import SchemaMigrationError, StoreError
from testmap.models import TestOwnership, VariantMapping
from testmap.store.schema import (
    TEST_MAPPING_SCHEMA,
    VARIANT_MAPPING_SCHEMA,
    Schema,
    build_table,
    field_from_column,
    schemas_equal,
)

logger = structlog.get_logger()

PUSH_BATCH_SIZE = 500
LATEST_VIEW_SUFFIX = "_latest"


class MappingRecord(Protocol):
    def identity(self) -> str: ...

    def to_row(self) -> dict[str, Any]: ...


T = TypeVar("T", bound=MappingRecord)


@dataclass(frozen=True)
class MappingTableSpec(Generic[T]):
    """Record type, column schema and identity columns of a mapping table."""

    record_type: type[T]
    schema: Schema
    identity: tuple[str, ...]

    def from_row(self, row: dict[str, Any]) -> T:
        return self.record_type.from_row(row)  # type: ignore[attr-defined]


TEST_MAPPING_SPEC: MappingTableSpec[TestOwnership] = MappingTableSpec(
    TestOwnership, TEST_MAPPING_SCHEMA, ("id",)
)
VARIANT_MAPPING_SPEC: MappingTableSpec[VariantMapping] = MappingTableSpec(
    VariantMapping, VARIANT_MAPPING_SCHEMA, ("variant_category", "variant_value")
)


class MigrationResult(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class PruneResult:
    """Outcome of pruning a table."""

    deleted: int
    deferred: bool = False


class MappingTableManager(Generic[T]):
    """
    Manages one mapping table in the analytical store.

    Args:
        engine: SQLAlchemy engine for the warehouse
        table_name: Name of the append-only table
        spec: Record type, schema and identity of the table
        query_timeout: Seconds a list or prune statement may run (PostgreSQL)
        batch_size: Rows per insert statement
    """

    def __init__(
        self,
        engine: Engine,
        table_name: str,
        spec: MappingTableSpec[T],
        *,
        query_timeout: float | None = None,
        batch_size: int = PUSH_BATCH_SIZE,
    ) -> None:
        self.engine = engine
        self.table_name = table_name
        self.spec = spec
        self.query_timeout = query_timeout
        self.batch_size = batch_size
        self.table = build_table(table_name, spec.schema)
        self.view = build_table(self.view_name, spec.schema)

    @property
    def view_name(self) -> str:
        return f"{self.table_name}{LATEST_VIEW_SUFFIX}"

    def migrate(self) -> MigrationResult:
        """
        Create the table, or bring an existing table up to the declared schema.

        Safe to run on every invocation: an up-to-date table is left alone.

        Raises:
            SchemaMigrationError: If the remote schema cannot be updated in place
            StoreError: If the store rejects the operation
        """
        try:
            inspector = inspect(self.engine)
            if not inspector.has_table(self.table_name):
                logger.info("creating_mapping_table", table=self.table_name)
                self.table.create(self.engine)
                self._create_latest_view()
                logger.info("mapping_table_created", table=self.table_name)
                return MigrationResult.CREATED

            remote = [field_from_column(c) for c in inspector.get_columns(self.table_name)]
            if schemas_equal(remote, self.spec.schema):
                if self.view_name not in inspector.get_view_names():
                    self._create_latest_view()
                logger.info("mapping_table_up_to_date", table=self.table_name)
                return MigrationResult.UNCHANGED

            self._update_schema(remote)
            self._create_latest_view()
            logger.info("mapping_table_schema_updated", table=self.table_name)
            return MigrationResult.UPDATED
        except SQLAlchemyError as e:
            logger.error("mapping_table_migration_failed", table=self.table_name, error=str(e))
            raise StoreError(
                f"could not migrate table {self.table_name}: {e}",
                details={"table": self.table_name},
            ) from e

    def _update_schema(self, remote: Schema) -> None:
        declared = self.spec.schema
        if len(remote) > len(declared) or not schemas_equal(remote, declared[: len(remote)]):
            raise SchemaMigrationError(
                f"table {self.table_name} has a schema that cannot be updated in place",
                details={
                    "table": self.table_name,
                    "remote": [f.name for f in remote],
                    "declared": [f.name for f in declared],
                },
            )

        missing = declared[len(remote) :]
        required = [f.name for f in missing if f.required]
        if required:
            raise SchemaMigrationError(
                f"cannot add required columns to {self.table_name} in place",
                details={"table": self.table_name, "columns": required},
            )

        preparer = self.engine.dialect.identifier_preparer
        with self.engine.begin() as conn:
            for field in missing:
                column_type = field.to_column().type.compile(dialect=self.engine.dialect)
                conn.execute(
                    text(
                        f"ALTER TABLE {preparer.quote(self.table_name)} "
                        f"ADD COLUMN {preparer.quote(field.name)} {column_type}"
                    )
                )
                logger.info("mapping_table_column_added", table=self.table_name, column=field.name)

    def _create_latest_view(self) -> None:
        """(Re)create the view selecting the newest generation of every identity."""
        table = self.table
        generations = table.alias("generations")
        newest = (
            select(func.max(generations.c.created_at))
            .where(and_(*(generations.c[col] == table.c[col] for col in self.spec.identity)))
            .scalar_subquery()
        )
        query = select(table).where(table.c.created_at == newest)
        sql = query.compile(dialect=self.engine.dialect, compile_kwargs={"literal_binds": True})

        view = self.engine.dialect.identifier_preparer.quote(self.view_name)
        with self.engine.begin() as conn:
            conn.execute(text(f"DROP VIEW IF EXISTS {view}"))
            conn.execute(text(f"CREATE VIEW {view} AS {sql}"))
        logger.debug("latest_view_created", table=self.table_name, view=self.view_name)

    def list_mappings(self) -> list[T]:
        """
        Fetch the newest generation of every identity from the latest view.

        Raises:
            StoreError: If the query fails
        """
        start = time.monotonic()
        logger.info("fetching_mappings", table=self.table_name)
        try:
            with self.engine.begin() as conn:
                self._apply_timeout(conn)
                rows = conn.execute(select(self.view)).mappings().all()
        except SQLAlchemyError as e:
            raise StoreError(
                f"could not list mappings from {self.view_name}: {e}",
                details={"table": self.table_name},
            ) from e

        results = [self.spec.from_row(dict(row)) for row in rows]
        logger.info(
            "mappings_fetched",
            table=self.table_name,
            rows=len(results),
            elapsed=round(time.monotonic() - start, 3),
        )
        return results

    def push_mappings(self, records: Sequence[T]) -> int:
        """
        Append records in batches of ``batch_size`` rows.

        Each batch is committed on its own. A failed batch stops the push;
        batches written before it stay in the table, and the latest view
        resolves any duplicates a retry produces.

        Returns:
            Number of rows written

        Raises:
            StoreError: If a batch is rejected
        """
        rows = [record.to_row() for record in records]
        pushed = 0
        for start in range(0, len(rows), self.batch_size):
            batch = rows[start : start + self.batch_size]
            try:
                self._insert_batch(batch)
            except SQLAlchemyError as e:
                logger.error(
                    "mapping_push_failed", table=self.table_name, pushed=pushed, error=str(e)
                )
                raise StoreError(
                    f"could not push mappings to {self.table_name}: {e}",
                    details={"table": self.table_name, "pushed": pushed},
                ) from e
            pushed += len(batch)
            logger.info("mapping_rows_added", table=self.table_name, rows=len(batch))
        return pushed

    def _insert_batch(self, rows: list[dict[str, Any]]) -> None:
        with self.engine.begin() as conn:
            conn.execute(insert(self.table), rows)

    def prune_mappings(self) -> PruneResult:
        """
        Delete every row older than the newest generation in the table.

        Stores that refuse deletes shortly after streaming inserts produce a
        deferred result instead of an error; the prune can be retried later.

        Raises:
            StoreError: If the delete fails for any other reason
        """
        start = time.monotonic()
        logger.info("pruning_mappings", table=self.table_name)

        generations = self.table.alias("generations")
        newest = select(func.max(generations.c.created_at)).scalar_subquery()
        stmt = delete(self.table).where(self.table.c.created_at < newest)

        try:
            with self.engine.begin() as conn:
                self._apply_timeout(conn)
                deleted = conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            if "streaming" in str(e).lower():
                logger.warning(
                    "prune_deferred",
                    table=self.table_name,
                    hint="please wait 90 minutes and try again; "
                    "the table cannot be pruned right after it was modified",
                )
                return PruneResult(deleted=0, deferred=True)
            raise StoreError(
                f"could not prune {self.table_name}: {e}",
                details={"table": self.table_name},
            ) from e

        logger.info(
            "mappings_pruned",
            table=self.table_name,
            deleted=deleted,
            elapsed=round(time.monotonic() - start, 3),
        )
        return PruneResult(deleted=deleted)

    def _apply_timeout(self, conn: Connection) -> None:
        if self.query_timeout and conn.dialect.name == "postgresql":
            conn.execute(text(f"SET LOCAL statement_timeout = {int(self.query_timeout * 1000)}"))


def exclude_existing(records: Iterable[T], existing: Iterable[T]) -> list[T]:
    """Records whose identity is not already present in ``existing``."""
    known = {record.identity() for record in existing}
    return [record for record in records if record.identity() not in known]
