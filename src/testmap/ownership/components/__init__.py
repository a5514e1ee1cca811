"""Ownership components package."""

from testmap.ownership.components.base import BaseComponent, ConfigComponent
from testmap.ownership.components.catalog import builtin_components, load_catalog
from testmap.ownership.components.installer import openshift_installer
from testmap.ownership.components.networking import ovn_kubernetes, router

__all__ = [
    "BaseComponent",
    "ConfigComponent",
    "builtin_components",
    "load_catalog",
    "openshift_installer",
    "ovn_kubernetes",
    "router",
]
