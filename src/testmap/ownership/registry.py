"""
Registry of ownership components.

The registry is built explicitly at startup and treated as read-only while
tests are resolved, so it can be shared between worker threads.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

from testmap.core.errors import ConfigurationError
from testmap.ownership.components.base import BaseComponent
from testmap.ownership.components.catalog import builtin_components, load_catalog

logger = structlog.get_logger()


class ComponentRegistry:
    """Named set of components queried by the resolvers."""

    def __init__(self, components: Iterable[BaseComponent] = ()) -> None:
        self._components: dict[str, BaseComponent] = {}
        for component in components:
            self.register(component)

    def register(self, component: BaseComponent) -> None:
        """
        Add a component.

        Raises:
            ConfigurationError: If a component with the same name exists
        """
        if component.name in self._components:
            raise ConfigurationError(
                "component registered twice", details={"component": component.name}
            )
        self._components[component.name] = component

    def get(self, name: str) -> BaseComponent | None:
        return self._components.get(name)

    @property
    def components(self) -> dict[str, BaseComponent]:
        return dict(self._components)

    def __iter__(self) -> Iterator[BaseComponent]:
        return iter(self._components.values())

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components


def default_registry(catalog_dir: str | Path | None = None) -> ComponentRegistry:
    """Build the registry from built-in components plus an optional catalog."""
    registry = ComponentRegistry(builtin_components())
    if catalog_dir:
        for component in load_catalog(catalog_dir):
            registry.register(component)
    logger.debug("component_registry_built", components=len(registry))
    return registry
