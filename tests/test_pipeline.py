"""Tests for mapping and prune runs."""

import json
from datetime import datetime, timedelta

import pytest
from sqlalchemy import Column, MetaData, String, Table, create_engine, text

from testmap.config.settings import Settings
from testmap.core.errors import ConfigurationError, ConflictError
from testmap.ownership.matcher import ComponentMatcher
from testmap.ownership.obsolete import StaticObsoleteTestManager
from testmap.ownership.registry import ComponentRegistry
from testmap.pipeline import run_map, run_prune, utc_now

GEN_1 = datetime(2026, 10, 1, 12, 0, 0)
GEN_2 = GEN_1 + timedelta(days=1)


@pytest.fixture
def pipeline_registry(make_component):
    return ComponentRegistry(
        [
            make_component(
                "Networking / sdn",
                ComponentMatcher(sig="sig-network", capabilities=["Networking"]),
                variants=["Network:sdn"],
            ),
            make_component(
                "Storage",
                ComponentMatcher(sig="sig-storage", capabilities=["Storage"]),
                variants=["Platform:aws"],
            ),
        ]
    )


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'warehouse.db'}"
    engine = create_engine(url)
    junit = Table("junit", MetaData(), Column("test_name", String), Column("testsuite", String))
    junit.create(engine)
    with engine.begin() as conn:
        conn.execute(
            junit.insert(),
            [
                {"test_name": "[sig-network] pods should talk", "testsuite": "conformance"},
                {"test_name": "[sig-storage] volumes mount", "testsuite": "conformance"},
                {"test_name": "unowned test", "testsuite": "misc"},
            ],
        )
    engine.dispose()
    return url


def warehouse_settings(tmp_path, database_url, **kwargs):
    return Settings(
        _env_file=None,
        mode="warehouse",
        database_url=database_url,
        data_dir=tmp_path / "data",
        **kwargs,
    )


def count_rows(database_url, table):
    engine = create_engine(database_url)
    with engine.connect() as conn:
        count = conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()
    engine.dispose()
    return count


def read_json(path):
    return json.loads(path.read_text())


class TestUtcNow:
    def test_naive_whole_seconds(self):
        now = utc_now()
        assert now.tzinfo is None
        assert now.microsecond == 0


class TestLocalRun:
    """Tests for runs against a local test snapshot."""

    def test_maps_snapshot(self, tmp_path, pipeline_registry):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "junit.json").write_text(
            json.dumps(
                [
                    {"name": "[sig-storage] volumes mount", "suite": "conformance"},
                    {"name": "unowned test", "suite": "misc"},
                ]
            )
        )
        settings = Settings(_env_file=None, data_dir=data_dir, map_variants=True)

        result = run_map(
            settings,
            registry=pipeline_registry,
            obsolete=StaticObsoleteTestManager(["unowned test"]),
            created_at=GEN_1,
        )

        assert result.matched == 1
        assert result.unmatched == 1
        assert result.pushed_tests == 0
        assert [v.identity() for v in result.variants] == ["Network:sdn", "Platform:aws"]

        mappings = read_json(data_dir / "component_mapping.json")
        assert [m["component"] for m in mappings] == ["Storage", "Unknown"]
        assert [m["staff_approved_obsolete"] for m in mappings] == [False, True]
        assert {m["created_at"] for m in mappings} == {"2026-10-01T12:00:00"}
        assert len(read_json(data_dir / "variant_mapping.json")) == 2

    def test_variants_skipped_without_flag(self, tmp_path, pipeline_registry):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "junit.json").write_text("[]")

        result = run_map(Settings(_env_file=None, data_dir=data_dir), registry=pipeline_registry)

        assert result.variants == []
        assert read_json(data_dir / "variant_mapping.json") == []

    def test_missing_snapshot(self, tmp_path, pipeline_registry):
        settings = Settings(_env_file=None, data_dir=tmp_path / "empty")
        with pytest.raises(ConfigurationError) as exc:
            run_map(settings, registry=pipeline_registry)
        assert "--mode=warehouse" in exc.value.message

    def test_invalid_flags_fail_before_work(self, tmp_path, pipeline_registry):
        settings = Settings(_env_file=None, data_dir=tmp_path / "data", push=True)
        with pytest.raises(ConfigurationError):
            run_map(settings, registry=pipeline_registry)
        assert not (tmp_path / "data").exists()

    def test_conflict_writes_nothing(self, tmp_path, make_component):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "junit.json").write_text(json.dumps([{"name": "[sig-network] t"}]))
        registry = ComponentRegistry(
            [
                make_component("A", ComponentMatcher(sig="sig-network")),
                make_component("B", ComponentMatcher(sig="sig-network")),
            ]
        )

        with pytest.raises(ConflictError):
            run_map(Settings(_env_file=None, data_dir=data_dir), registry=registry)
        assert not (data_dir / "component_mapping.json").exists()


class TestWarehouseRun:
    """Tests for runs against the warehouse."""

    def test_push_and_snapshot(self, tmp_path, database_url, pipeline_registry):
        settings = warehouse_settings(tmp_path, database_url, push=True, map_variants=True)

        result = run_map(settings, registry=pipeline_registry, created_at=GEN_1)

        assert result.pushed_tests == 3
        assert result.pushed_variants == 2
        assert count_rows(database_url, "component_mapping") == 3
        assert count_rows(database_url, "variant_mapping") == 2

        tests = read_json(tmp_path / "data" / "junit.json")
        assert [t["name"] for t in tests] == [
            "[sig-network] pods should talk",
            "[sig-storage] volumes mount",
            "unowned test",
        ]

    def test_second_run_only_pushes_new_variants(self, tmp_path, database_url, pipeline_registry):
        settings = warehouse_settings(tmp_path, database_url, push=True, map_variants=True)
        run_map(settings, registry=pipeline_registry, created_at=GEN_1)

        result = run_map(settings, registry=pipeline_registry, created_at=GEN_2)

        assert result.pushed_tests == 3
        assert result.pushed_variants == 0
        assert count_rows(database_url, "component_mapping") == 6
        assert count_rows(database_url, "variant_mapping") == 2

    def test_no_push_leaves_tables_empty(self, tmp_path, database_url, pipeline_registry):
        settings = warehouse_settings(tmp_path, database_url, map_variants=True)

        result = run_map(settings, registry=pipeline_registry, created_at=GEN_1)

        assert result.pushed_tests == 0
        assert len(result.variants) == 2
        assert count_rows(database_url, "component_mapping") == 0

    def test_local_run_reuses_warehouse_snapshot(self, tmp_path, database_url, pipeline_registry):
        run_map(warehouse_settings(tmp_path, database_url), registry=pipeline_registry)

        local = Settings(_env_file=None, data_dir=tmp_path / "data")
        result = run_map(local, registry=pipeline_registry)

        assert len(result.tests) == 3


class TestPrune:
    """Tests for pruning runs."""

    def test_prunes_both_tables(self, tmp_path, database_url, pipeline_registry):
        settings = warehouse_settings(tmp_path, database_url, push=True, map_variants=True)
        run_map(settings, registry=pipeline_registry, created_at=GEN_1)
        run_map(settings, registry=pipeline_registry, created_at=GEN_2)

        results = run_prune(settings)

        assert results["component_mapping"].deleted == 3
        # all variants belong to the first (and newest) variant generation
        assert results["variant_mapping"].deleted == 0
        assert count_rows(database_url, "component_mapping") == 3

    def test_requires_warehouse_mode(self, tmp_path):
        with pytest.raises(ConfigurationError):
            run_prune(Settings(_env_file=None, data_dir=tmp_path))
