"""Tests for the testmap command line."""

import json

import pytest

from testmap.cli.components import components_command, describe_registry
from testmap.cli.main import build_parser, main
from testmap.cli.map import map_command
from testmap.cli.options import settings_from_args
from testmap.cli.prune import prune_command
from testmap.config.settings import Settings, get_settings
from testmap.core.errors import ExitCode
from testmap.ownership.registry import ComponentRegistry
from testmap.store.mapping_table import PruneResult


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def snapshot_dir(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "junit.json").write_text(json.dumps([{"name": "unowned test", "suite": "s"}]))
    return data_dir


def run_main(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestParser:
    """Tests for argument parsing."""

    def test_map_flags_become_settings(self):
        args = build_parser().parse_args(
            [
                "map",
                "--mode",
                "warehouse",
                "--database-url",
                "sqlite://",
                "--push",
                "--map-variants",
                "--workers",
                "4",
                "--table-mapping",
                "tests_v2",
                "--query-timeout",
                "30",
            ]
        )
        settings = settings_from_args(args)

        assert settings.mode == "warehouse"
        assert settings.database_url == "sqlite://"
        assert settings.push is True
        assert settings.map_variants is True
        assert settings.workers == 4
        assert settings.test_mapping_table == "tests_v2"
        assert settings.query_timeout_seconds == 30.0

    def test_unset_flags_fall_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("TESTMAP_WORKERS", "3")
        args = build_parser().parse_args(["map"])

        settings = settings_from_args(args)

        assert settings.workers == 3
        assert settings.push is False

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["map", "--mode", "bigquery"])


class TestMain:
    """Tests for exit codes of the entry point."""

    def test_no_command(self, capsys):
        assert run_main([]) == ExitCode.CONFIG_ERROR
        assert "usage" in capsys.readouterr().out

    def test_components(self, capsys):
        assert run_main(["--log-format", "console", "components", "-f", "json"]) == 0
        names = [c["name"] for c in json.loads(capsys.readouterr().out)]
        assert "Networking / ovn-kubernetes" in names

    def test_map_local(self, snapshot_dir, capsys):
        code = run_main(["map", "--data-dir", str(snapshot_dir), "--format", "json"])

        assert code == ExitCode.SUCCESS
        summary = json.loads(capsys.readouterr().out)
        assert summary["tests"] == 1
        assert summary["unmatched"] == 1
        assert (snapshot_dir / "component_mapping.json").exists()

    def test_push_in_local_mode_prints_usage(self, snapshot_dir, capsys):
        code = run_main(["map", "--data-dir", str(snapshot_dir), "--push"])

        assert code == ExitCode.CONFIG_ERROR
        out = capsys.readouterr().out
        assert "cannot push" in out
        assert "usage: testmap map" in out

    def test_prune_requires_warehouse(self):
        assert run_main(["prune"]) == ExitCode.CONFIG_ERROR

    @pytest.mark.parametrize("command", ["map", "prune"])
    def test_invalid_environment_value_is_config_error(self, monkeypatch, capsys, command):
        monkeypatch.setenv("TESTMAP_WORKERS", "abc")

        assert run_main([command]) == ExitCode.CONFIG_ERROR
        out = capsys.readouterr().out
        assert "invalid settings" in out
        assert "workers" in out
        assert f"usage: testmap {command}" in out

    def test_invalid_value_in_command_settings(self, monkeypatch, capsys, snapshot_dir):
        # cached while the environment is clean, so only the command's settings fail
        get_settings()
        monkeypatch.setenv("TESTMAP_PUSH", "maybe")

        assert run_main(["map", "--data-dir", str(snapshot_dir)]) == ExitCode.CONFIG_ERROR
        assert "usage: testmap map" in capsys.readouterr().out


class TestCommands:
    """Tests for command functions."""

    def test_map_missing_snapshot(self, tmp_path):
        settings = Settings(_env_file=None, data_dir=tmp_path / "none")
        assert map_command(settings) == ExitCode.CONFIG_ERROR

    def test_map_table_output(self, snapshot_dir, capsys):
        settings = Settings(_env_file=None, data_dir=snapshot_dir)

        assert map_command(settings) == ExitCode.SUCCESS
        assert "Mapping summary" in capsys.readouterr().out

    def test_prune_deferred_is_warning(self, monkeypatch):
        monkeypatch.setattr(
            "testmap.cli.prune.run_prune",
            lambda settings: {
                "component_mapping": PruneResult(deleted=0, deferred=True),
                "variant_mapping": PruneResult(deleted=2),
            },
        )
        settings = Settings(_env_file=None, mode="warehouse", database_url="sqlite://")

        assert prune_command(settings) == ExitCode.WARNING

    def test_prune_success(self, monkeypatch, capsys):
        monkeypatch.setattr(
            "testmap.cli.prune.run_prune",
            lambda settings: {"component_mapping": PruneResult(deleted=5)},
        )
        settings = Settings(_env_file=None, mode="warehouse", database_url="sqlite://")

        assert prune_command(settings, output_format="json") == ExitCode.SUCCESS
        out = capsys.readouterr().out
        assert '"deleted": 5' in out

    def test_bad_catalog(self, tmp_path):
        assert components_command(catalog_dir=str(tmp_path / "missing")) == ExitCode.CONFIG_ERROR

    def test_describe_registry(self, make_component):
        registry = ComponentRegistry(
            [make_component("B", variants=["Arch:arm64"], jira_project="ARM"), make_component("A")]
        )

        summaries = describe_registry(registry)

        assert [s["name"] for s in summaries] == ["A", "B"]
        assert summaries[1] == {
            "name": "B",
            "jira_project": "ARM",
            "jira_components": ["B"],
            "variants": ["Arch:arm64"],
        }
