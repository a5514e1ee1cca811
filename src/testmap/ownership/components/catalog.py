"""
Component catalog loading.

Besides the built-in components, ownership rules can be supplied as YAML
files. A catalog file holds a list of components (or a mapping with a
``components`` key):

    components:
      - name: Storage / csi
        default_jira_component: Storage / csi
        operators: [storage]
        matchers:
          - sig: sig-storage
            capabilities: [CSI]
          - suite: storage scenarios
            priority: 1
        test_renames:
          "new test name": "old test name"
        variants: ["Storage:csi"]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from testmap.core.errors import ConfigurationError
from testmap.ownership.components.base import ConfigComponent
from testmap.ownership.components.installer import openshift_installer
from testmap.ownership.components.networking import ovn_kubernetes, router
from testmap.ownership.matcher import ComponentConfig

logger = structlog.get_logger()


def builtin_components() -> list[ConfigComponent]:
    """Components shipped with testmap."""
    return [openshift_installer(), ovn_kubernetes(), router()]


def load_catalog(path: str | Path) -> list[ConfigComponent]:
    """
    Load components from a YAML file, or from every ``*.yaml``/``*.yml``
    file in a directory (sorted by file name).

    Raises:
        ConfigurationError: If a file cannot be read or is malformed
    """
    path = Path(path)
    if path.is_dir():
        files = sorted([*path.glob("*.yaml"), *path.glob("*.yml")])
    elif path.exists():
        files = [path]
    else:
        raise ConfigurationError("component catalog not found", details={"path": str(path)})

    components: list[ConfigComponent] = []
    for file in files:
        components.extend(_load_file(file))
    return components


def _load_file(path: Path) -> list[ConfigComponent]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"could not read component catalog: {e}", details={"path": str(path)}
        ) from e

    entries = _entries(data, path)
    components = [ConfigComponent(ComponentConfig.from_dict(entry)) for entry in entries]
    logger.debug("loaded_component_catalog", path=str(path), components=len(components))
    return components


def _entries(data: Any, path: Path) -> list[dict[str, Any]]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("components", [])
    if not isinstance(data, list) or not all(isinstance(e, dict) for e in data):
        raise ConfigurationError(
            "component catalog must be a list of components", details={"path": str(path)}
        )
    return data
