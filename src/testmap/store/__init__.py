"""Analytical store: versioned mapping tables and the junit test corpus."""

from testmap.store.engine import create_warehouse_engine, resolve_database_url
from testmap.store.mapping_table import (
    PUSH_BATCH_SIZE,
    TEST_MAPPING_SPEC,
    VARIANT_MAPPING_SPEC,
    MappingTableManager,
    MappingTableSpec,
    MigrationResult,
    PruneResult,
    exclude_existing,
)
from testmap.store.schema import (
    TEST_MAPPING_SCHEMA,
    VARIANT_MAPPING_SCHEMA,
    FieldSchema,
    schemas_equal,
)

__all__ = [
    "PUSH_BATCH_SIZE",
    "TEST_MAPPING_SCHEMA",
    "TEST_MAPPING_SPEC",
    "VARIANT_MAPPING_SCHEMA",
    "VARIANT_MAPPING_SPEC",
    "FieldSchema",
    "MappingTableManager",
    "MappingTableSpec",
    "MigrationResult",
    "PruneResult",
    "create_warehouse_engine",
    "exclude_existing",
    "resolve_database_url",
    "schemas_equal",
]
