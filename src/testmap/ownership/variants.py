"""
Job variant ownership.

Components claim CI job variants ("category:value" identities). Each
identity may be claimed by a single component; there is no priority to
break ties, so any duplicate claim is a conflict.
"""

from __future__ import annotations

import structlog

from testmap.core.errors import ConflictError, IdentificationError, TestMapError
from testmap.models import (
    VARIANT_MAPPING_API_VERSION,
    VARIANT_MAPPING_KIND,
    VariantMapping,
)
from testmap.ownership.defaults import OwnershipDefaults
from testmap.ownership.registry import ComponentRegistry

logger = structlog.get_logger()


class VariantIdentifier:
    """Maps job variants to the JIRA project and component of their owner."""

    def __init__(
        self,
        registry: ComponentRegistry,
        defaults: OwnershipDefaults | None = None,
    ) -> None:
        self.registry = registry
        self.defaults = defaults or OwnershipDefaults()

    def identify(self) -> list[VariantMapping]:
        """
        Collect variant claims from every component.

        Malformed identities are logged and skipped. Components without a
        JIRA component contribute no mappings.

        Returns:
            Mappings sorted by variant category, then value

        Raises:
            ConflictError: If two components claim the same variant
        """
        logger.debug("identifying_variants", components=len(self.registry))
        claimed: dict[str, tuple[str, VariantMapping | None]] = {}

        for component in self.registry:
            try:
                variants = component.identify_variants()
            except TestMapError:
                raise
            except Exception as e:
                raise IdentificationError(
                    f"component {component.name!r} failed to list variants: {e}",
                    details={"component": component.name},
                ) from e

            for variant in variants:
                if variant in claimed:
                    owner, _ = claimed[variant]
                    logger.error(
                        "duplicate_variant_claim",
                        component=component.name,
                        variant=variant,
                        owner=owner,
                    )
                    raise ConflictError(
                        "duplicate variant mapping",
                        details={"variant": variant, "components": [owner, component.name]},
                    )

                parts = variant.split(":")
                if len(parts) != 2:
                    logger.error("malformed_variant", component=component.name, variant=variant)
                    continue

                jira_components = component.jira_components()
                mapping = None
                if jira_components:
                    mapping = VariantMapping(
                        variant_category=parts[0],
                        variant_value=parts[1],
                        jira_project=component.jira_project(),
                        jira_component=jira_components[0],
                    )
                claimed[variant] = (component.name, mapping)

        mappings = [
            self.set_defaults(mapping) for _, mapping in claimed.values() if mapping is not None
        ]
        mappings.sort(key=lambda m: (m.variant_category, m.variant_value))
        return mappings

    def set_defaults(self, mapping: VariantMapping) -> VariantMapping:
        mapping.kind = VARIANT_MAPPING_KIND
        mapping.api_version = VARIANT_MAPPING_API_VERSION

        if not mapping.product:
            mapping.product = self.defaults.product

        if not mapping.jira_component:
            mapping.jira_component = self.defaults.component

        if not mapping.jira_project:
            mapping.jira_project = self.defaults.project

        return mapping
