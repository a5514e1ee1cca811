"""
Mapping run.

Resolves ownership for the test corpus and (optionally) job variants,
pushes the results to the warehouse and writes local JSON snapshots.

Steps:
1. Validate settings
2. Warehouse mode: migrate mapping tables, list and snapshot tests;
   local mode: read the tests snapshot
3. Resolve test ownership (one full generation per run)
4. Resolve variants, keeping only identities not yet recorded
5. Push, then write snapshots
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog
from sqlalchemy import Engine

from testmap.config.settings import MODE_WAREHOUSE, Settings, validate_run_mode
from testmap.core.errors import ConfigurationError
from testmap.jira import JiraComponentClient
from testmap.logging import bind_context
from testmap.models import TestInfo, TestOwnership, VariantMapping
from testmap.ownership.obsolete import ObsoleteTestManager, StaticObsoleteTestManager
from testmap.ownership.registry import ComponentRegistry, default_registry
from testmap.ownership.resolver import TestIdentifier
from testmap.ownership.variants import VariantIdentifier
from testmap.sources import LocalTestSource, WarehouseTestSource, write_records
from testmap.store.engine import create_warehouse_engine
from testmap.store.mapping_table import (
    TEST_MAPPING_SPEC,
    VARIANT_MAPPING_SPEC,
    MappingTableManager,
    PruneResult,
    exclude_existing,
)

logger = structlog.get_logger()


@dataclass
class MapResult:
    """Summary of a mapping run."""

    tests: list[TestOwnership]
    variants: list[VariantMapping]
    matched: int = 0
    unmatched: int = 0
    pushed_tests: int = 0
    pushed_variants: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "tests": len(self.tests),
            "matched": self.matched,
            "unmatched": self.unmatched,
            "variants": len(self.variants),
            "pushed_tests": self.pushed_tests,
            "pushed_variants": self.pushed_variants,
        }


@dataclass(frozen=True)
class SnapshotPaths:
    tests: Path
    test_mappings: Path
    variant_mappings: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> SnapshotPaths:
        base = Path(settings.data_dir)
        return cls(
            tests=base / f"{settings.junit_table}.json",
            test_mappings=base / f"{settings.test_mapping_table}.json",
            variant_mappings=base / f"{settings.variant_mapping_table}.json",
        )


def utc_now() -> datetime:
    """Generation timestamp: naive UTC, second precision."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def load_component_ids(settings: Settings) -> dict[str, int]:
    if not settings.jira_url:
        logger.info("jira_lookup_skipped", reason="no jira_url configured")
        return {}
    client = JiraComponentClient(
        settings.jira_url,
        settings.jira_project,
        token=settings.jira_token,
        timeout=settings.http_timeout,
    )
    return client.get_component_ids()


def load_obsolete_manager(settings: Settings) -> ObsoleteTestManager:
    if settings.obsolete_tests_file:
        return StaticObsoleteTestManager.from_file(settings.obsolete_tests_file)
    return StaticObsoleteTestManager()


def table_managers(
    engine: Engine, settings: Settings
) -> tuple[MappingTableManager[TestOwnership], MappingTableManager[VariantMapping]]:
    tests = MappingTableManager(
        engine,
        settings.test_mapping_table,
        TEST_MAPPING_SPEC,
        query_timeout=settings.query_timeout_seconds,
    )
    variants = MappingTableManager(
        engine,
        settings.variant_mapping_table,
        VARIANT_MAPPING_SPEC,
        query_timeout=settings.query_timeout_seconds,
    )
    return tests, variants


def run_map(
    settings: Settings,
    *,
    engine: Engine | None = None,
    registry: ComponentRegistry | None = None,
    component_ids: dict[str, int] | None = None,
    obsolete: ObsoleteTestManager | None = None,
    created_at: datetime | None = None,
) -> MapResult:
    """
    Execute a full mapping run.

    Collaborators default to those described by ``settings`` and may be
    injected directly.

    Raises:
        ConfigurationError: Invalid settings, before any work is done
        ConflictError / IdentificationError: Tests or variants could not be resolved
        StoreError: The warehouse rejected an operation
    """
    validate_run_mode(settings)
    log = bind_context(mode=settings.mode)
    paths = SnapshotPaths.from_settings(settings)

    test_table: MappingTableManager[TestOwnership] | None = None
    variant_table: MappingTableManager[VariantMapping] | None = None

    if settings.mode == MODE_WAREHOUSE:
        engine = engine or create_warehouse_engine(settings)
        test_table, variant_table = table_managers(engine, settings)
        test_table.migrate()
        variant_table.migrate()

        tests = WarehouseTestSource(engine, settings.junit_table).list_tests()
        write_records(tests, paths.tests)
    else:
        tests = LocalTestSource(paths.tests).list_tests()

    if registry is None:
        registry = default_registry(settings.catalog_dir)
    if component_ids is None:
        component_ids = load_component_ids(settings)
    if obsolete is None:
        obsolete = load_obsolete_manager(settings)
    created_at = created_at or utc_now()

    start = time.monotonic()
    log.info("mapping_tests", tests=len(tests), components=len(registry))
    identifier = TestIdentifier(registry, component_ids)
    test_mappings = identifier.map_tests(tests, workers=settings.workers)

    result = MapResult(tests=test_mappings, variants=[])
    for ownership in test_mappings:
        ownership.created_at = created_at
        ownership.staff_approved_obsolete = obsolete.is_obsolete(
            TestInfo(name=ownership.name, suite=ownership.suite)
        )
        if ownership.component == identifier.defaults.component:
            result.unmatched += 1
        else:
            result.matched += 1
    log.info(
        "mapping_tests_complete",
        matched=result.matched,
        unmatched=result.unmatched,
        elapsed=round(time.monotonic() - start, 3),
    )

    if settings.map_variants:
        log.info("mapping_variants")
        variant_mappings = VariantIdentifier(registry).identify()
        for mapping in variant_mappings:
            mapping.created_at = created_at
        if variant_table is not None:
            variant_mappings = exclude_existing(variant_mappings, variant_table.list_mappings())
        result.variants = variant_mappings
        log.info("mapping_variants_complete", new_variants=len(variant_mappings))

    if settings.push and test_table is not None and variant_table is not None:
        log.info("pushing_mappings")
        result.pushed_tests = test_table.push_mappings(result.tests)
        result.pushed_variants = variant_table.push_mappings(result.variants)
        log.info("push_complete", tests=result.pushed_tests, variants=result.pushed_variants)

    write_records(result.tests, paths.test_mappings)
    write_records(result.variants, paths.variant_mappings)
    return result


def run_prune(settings: Settings, *, engine: Engine | None = None) -> dict[str, PruneResult]:
    """
    Prune superseded generations from both mapping tables.

    Returns:
        Prune result per table name
    """
    validate_run_mode(settings)
    if settings.mode != MODE_WAREHOUSE:
        raise ConfigurationError(
            "pruning requires --mode=warehouse", details={"mode": settings.mode}
        )

    engine = engine or create_warehouse_engine(settings)
    results: dict[str, PruneResult] = {}
    for manager in table_managers(engine, settings):
        results[manager.table_name] = manager.prune_mappings()
    return results
