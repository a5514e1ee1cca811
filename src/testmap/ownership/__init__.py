"""
Ownership resolution for tests and CI job variants.

Components declare matching rules; the resolvers ask every component for
claims, apply defaults and resolve conflicts.
"""

from testmap.ownership.defaults import (
    DEFAULT_CAPABILITY,
    DEFAULT_COMPONENT,
    DEFAULT_PRODUCT,
    DEFAULT_PROJECT,
    OwnershipDefaults,
)
from testmap.ownership.matcher import (
    ComponentConfig,
    ComponentMatcher,
    identify_operator_test,
    is_sig_test,
)
from testmap.ownership.registry import ComponentRegistry, default_registry
from testmap.ownership.resolver import TestIdentifier, highest_priority
from testmap.ownership.stable_id import stable_id
from testmap.ownership.variants import VariantIdentifier

__all__ = [
    # Defaults
    "DEFAULT_CAPABILITY",
    "DEFAULT_COMPONENT",
    "DEFAULT_PRODUCT",
    "DEFAULT_PROJECT",
    "OwnershipDefaults",
    # Matching
    "ComponentConfig",
    "ComponentMatcher",
    "identify_operator_test",
    "is_sig_test",
    "stable_id",
    # Registry
    "ComponentRegistry",
    "default_registry",
    # Resolvers
    "TestIdentifier",
    "VariantIdentifier",
    "highest_priority",
]
