"""
Rule matching for component ownership.

A component owns a test when one of its matchers accepts the test's
descriptor. Conditions set on a single matcher are ANDed together; a
component's matchers are tried in declaration order and the first one
that accepts the test wins. Operator health tests are recognised before
any declared matcher is consulted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from testmap.core.errors import ConfigurationError
from testmap.models import TestInfo

# (name pattern, capabilities) for tests about the health of an operator.
# "{operator}" is substituted with each operator a component declares.
OPERATOR_TEST_PATTERNS: list[tuple[str, list[str]]] = [
    ("operator install {operator}", ["Operator Install"]),
    ("operator upgrade {operator}", ["Operator Upgrade"]),
    ("operator conditions {operator}", ["Operator Conditions"]),
    ("clusteroperator/{operator} should not change condition/", ["Operator Conditions"]),
]


@dataclass
class ComponentMatcher:
    """
    A single ownership rule.

    The first group of fields are conditions, all of which must hold. The
    second group is the ownership metadata assigned on a match.
    """

    sig: str = ""
    suite: str = ""
    include_substrings: list[str] = field(default_factory=list)
    exclude_substrings: list[str] = field(default_factory=list)

    jira_component: str = ""
    capabilities: list[str] = field(default_factory=list)
    priority: int = 0

    def matches(self, test: TestInfo) -> bool:
        """Return True if every condition set on this matcher holds for the test."""
        if self.sig and not is_sig_test(test.name, self.sig):
            return False

        if self.suite and not self.is_suite_test(test):
            return False

        if self.include_substrings and not contains_all(test.name, self.include_substrings):
            return False

        # Exclusion uses the same all-present evaluator: a test is only
        # excluded when it contains every exclude substring.
        if self.exclude_substrings and contains_all(test.name, self.exclude_substrings):
            return False

        return True

    def is_suite_test(self, test: TestInfo) -> bool:
        return test.suite == self.suite

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentMatcher:
        return cls(
            sig=data.get("sig", ""),
            suite=data.get("suite", ""),
            include_substrings=list(data.get("include_substrings", [])),
            exclude_substrings=list(data.get("exclude_substrings", [])),
            jira_component=data.get("jira_component", ""),
            capabilities=list(data.get("capabilities", [])),
            priority=int(data.get("priority", 0)),
        )


@dataclass
class ComponentConfig:
    """
    Static ownership data for one component.

    Attributes:
        name: Component name recorded on ownership claims
        default_jira_component: JIRA component used when a matcher has none
        operators: Operators whose health tests this component owns
        matchers: Ownership rules, evaluated in order
        test_renames: Current test name -> historical stable name
        variants: Claimed job variant identities ("category:value")
        jira_project: JIRA project for variant mappings
        capability_markers: Test name substring -> capability tag
    """

    name: str
    default_jira_component: str = ""
    operators: list[str] = field(default_factory=list)
    matchers: list[ComponentMatcher] = field(default_factory=list)
    test_renames: dict[str, str] = field(default_factory=dict)
    variants: list[str] = field(default_factory=list)
    jira_project: str = ""
    capability_markers: dict[str, str] = field(default_factory=dict)

    def find_match(self, test: TestInfo) -> ComponentMatcher | None:
        """
        Find the rule that claims a test for this component.

        Operator health tests take precedence and produce a synthesized
        matcher carrying the default JIRA component and the operator
        capabilities. Otherwise the first accepting matcher is returned.

        Returns:
            The matching ComponentMatcher, or None when the component abstains
        """
        is_operator_test, capabilities = self.is_operator_test(test)
        if is_operator_test:
            return ComponentMatcher(
                jira_component=self.default_jira_component,
                capabilities=capabilities,
            )

        for matcher in self.matchers:
            if matcher.matches(test):
                return matcher

        return None

    def is_operator_test(self, test: TestInfo) -> tuple[bool, list[str]]:
        for operator in self.operators:
            is_operator_test, capabilities = identify_operator_test(operator, test.name)
            if is_operator_test:
                return True, capabilities
        return False, []

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentConfig:
        """Build a component from a catalog entry (e.g. parsed YAML)."""
        if not data.get("name"):
            raise ConfigurationError("component entry is missing a name", details={"entry": data})

        return cls(
            name=data["name"],
            default_jira_component=data.get("default_jira_component", ""),
            operators=list(data.get("operators", [])),
            matchers=[ComponentMatcher.from_dict(m) for m in data.get("matchers", [])],
            test_renames=dict(data.get("test_renames", {})),
            variants=list(data.get("variants", [])),
            jira_project=data.get("jira_project", ""),
            capability_markers=dict(data.get("capability_markers", {})),
        )


def is_sig_test(name: str, sig: str) -> bool:
    """Return True if the test name carries the ``[sig-...]`` marker."""
    return f"[{sig}]" in name


def contains_all(name: str, substrings: list[str]) -> bool:
    return all(substring in name for substring in substrings)


def identify_operator_test(operator: str, name: str) -> tuple[bool, list[str]]:
    """
    Recognise install, upgrade and condition tests for an operator.

    Returns:
        (True, capabilities) for an operator health test, (False, []) otherwise
    """
    for pattern, capabilities in OPERATOR_TEST_PATTERNS:
        if pattern.format(operator=operator) in name:
            return True, list(capabilities)
    return False, []
