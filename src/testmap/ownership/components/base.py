"""
Base class for ownership components.

All components must implement identify_test(), identify_variants(),
stable_id(), jira_components() and jira_project().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from testmap.models import TestInfo, TestOwnership
from testmap.ownership.matcher import ComponentConfig


class BaseComponent(ABC):
    """
    Abstract base class for components that claim tests and variants.

    All components must implement:
    - identify_test(): Claim a test, or abstain with None
    - identify_variants(): Job variant identities owned by the component
    - stable_id(): Rename-resistant name used to hash the test's ID
    - jira_components(): JIRA components the component files bugs under
    - jira_project(): JIRA project for variant mappings
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Component name for identification."""

    @abstractmethod
    def identify_test(self, test: TestInfo) -> TestOwnership | None:
        """
        Claim ownership of a test.

        Args:
            test: Test descriptor to evaluate

        Returns:
            TestOwnership claim if the component owns the test, None otherwise
        """

    @abstractmethod
    def identify_variants(self) -> list[str]:
        """Return claimed variant identities in ``category:value`` form."""

    @abstractmethod
    def stable_id(self, test: TestInfo) -> str:
        """Return the stable name for a test."""

    @abstractmethod
    def jira_components(self) -> list[str]:
        """Return JIRA components, default component first."""

    @abstractmethod
    def jira_project(self) -> str:
        """Return the JIRA project for this component."""


@dataclass
class ConfigComponent(BaseComponent):
    """
    Component driven entirely by a ComponentConfig.

    Concrete catalog entries wrap a config in this class; components that
    need custom logic can subclass it and override individual methods.
    """

    config: ComponentConfig

    @property
    def name(self) -> str:
        return self.config.name

    def identify_test(self, test: TestInfo) -> TestOwnership | None:
        matcher = self.config.find_match(test)
        if matcher is None:
            return None

        return TestOwnership(
            name=test.name,
            component=self.config.name,
            jira_component=matcher.jira_component or self.config.default_jira_component,
            priority=matcher.priority,
            capabilities=[*matcher.capabilities, *self.identify_capabilities(test)],
        )

    def identify_capabilities(self, test: TestInfo) -> list[str]:
        """Capabilities derived from markers in the test name."""
        return [
            capability
            for marker, capability in self.config.capability_markers.items()
            if marker in test.name
        ]

    def identify_variants(self) -> list[str]:
        return list(self.config.variants)

    def stable_id(self, test: TestInfo) -> str:
        # Renamed tests keep hashing under their historical name.
        return self.config.test_renames.get(test.name, test.name)

    def jira_components(self) -> list[str]:
        components = [self.config.default_jira_component]
        for matcher in self.config.matchers:
            if matcher.jira_component and matcher.jira_component not in components:
                components.append(matcher.jira_component)
        return [c for c in components if c]

    def jira_project(self) -> str:
        return self.config.jira_project
