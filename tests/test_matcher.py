"""Tests for component rule matching."""

from testmap.models import TestInfo
from testmap.ownership.matcher import (
    ComponentConfig,
    ComponentMatcher,
    identify_operator_test,
    is_sig_test,
)


class TestIsSigTest:
    """Tests for SIG marker detection."""

    def test_marker_present(self):
        assert is_sig_test("[sig-network] services should work", "sig-network")

    def test_marker_must_be_bracketed(self):
        """A SIG name that only prefixes another SIG does not match."""
        assert not is_sig_test("[sig-network-edge] routes", "sig-network")
        assert not is_sig_test("sig-network services", "sig-network")


class TestIdentifyOperatorTest:
    """Tests for operator health test recognition."""

    def test_install(self):
        ok, capabilities = identify_operator_test("ingress", "operator install ingress")
        assert ok
        assert capabilities == ["Operator Install"]

    def test_conditions(self):
        name = "[sig-arch] clusteroperator/ingress should not change condition/Available"
        ok, capabilities = identify_operator_test("ingress", name)
        assert ok
        assert capabilities == ["Operator Conditions"]

    def test_other_operator(self):
        ok, capabilities = identify_operator_test("dns", "operator install ingress")
        assert not ok
        assert capabilities == []


class TestComponentMatcher:
    """Tests for a single rule."""

    def test_empty_matcher_matches_everything(self):
        assert ComponentMatcher().matches(TestInfo(name="anything", suite="s"))

    def test_conditions_are_anded(self):
        matcher = ComponentMatcher(sig="sig-network", suite="X")
        assert matcher.matches(TestInfo(name="[sig-network] a", suite="X"))
        assert not matcher.matches(TestInfo(name="[sig-network] a", suite="Y"))
        assert not matcher.matches(TestInfo(name="[sig-storage] a", suite="X"))

    def test_include_requires_all_substrings(self):
        matcher = ComponentMatcher(include_substrings=["ingress-to-", "disruption"])
        assert matcher.matches(TestInfo(name="ingress-to-console disruption"))
        assert not matcher.matches(TestInfo(name="ingress-to-console availability"))

    def test_exclude_only_when_every_substring_present(self):
        """Exclusion shares the all-present evaluator with inclusion."""
        matcher = ComponentMatcher(exclude_substrings=["Skipped:Network/A", "Serial"])
        assert not matcher.matches(TestInfo(name="x [Skipped:Network/A] [Serial]"))
        assert matcher.matches(TestInfo(name="x [Skipped:Network/A]"))
        assert matcher.matches(TestInfo(name="x [Serial]"))

    def test_include_and_exclude_together(self):
        matcher = ComponentMatcher(
            sig="sig-network",
            include_substrings=["Skipped:Network/"],
            exclude_substrings=["Skipped:Network/OVNKubernetes"],
        )
        assert matcher.matches(TestInfo(name="[sig-network] a [Skipped:Network/OpenShiftSDN]"))
        assert not matcher.matches(
            TestInfo(name="[sig-network] a [Skipped:Network/OVNKubernetes]")
        )

    def test_from_dict(self):
        matcher = ComponentMatcher.from_dict(
            {"suite": "fips", "priority": "2", "capabilities": ["FIPS"]}
        )
        assert matcher.suite == "fips"
        assert matcher.priority == 2
        assert matcher.capabilities == ["FIPS"]


class TestFindMatch:
    """Tests for first-match-wins rule evaluation."""

    def test_first_matching_rule_wins(self):
        first = ComponentMatcher(suite="X", priority=1)
        second = ComponentMatcher(sig="sig-network", priority=5)
        config = ComponentConfig(name="c", matchers=[first, second])

        assert config.find_match(TestInfo(name="[sig-network] a", suite="X")) is first
        assert config.find_match(TestInfo(name="[sig-network] a", suite="Y")) is second

    def test_no_match_abstains(self):
        config = ComponentConfig(name="c", matchers=[ComponentMatcher(suite="X")])
        assert config.find_match(TestInfo(name="a", suite="Y")) is None

    def test_operator_test_takes_precedence(self):
        config = ComponentConfig(
            name="Networking / router",
            default_jira_component="Networking / router",
            operators=["ingress"],
            matchers=[ComponentMatcher(include_substrings=["ingress"], priority=3)],
        )
        matcher = config.find_match(TestInfo(name="operator upgrade ingress"))

        assert matcher is not None
        assert matcher.jira_component == "Networking / router"
        assert matcher.capabilities == ["Operator Upgrade"]
        assert matcher.priority == 0

    def test_from_dict_builds_matchers(self):
        config = ComponentConfig.from_dict(
            {
                "name": "Storage",
                "default_jira_component": "Storage / csi",
                "matchers": [{"sig": "sig-storage"}],
                "test_renames": {"new": "old"},
            }
        )
        assert config.matchers[0].sig == "sig-storage"
        assert config.test_renames == {"new": "old"}
