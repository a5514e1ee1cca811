"""Networking ownership rules: ovn-kubernetes and router."""

from __future__ import annotations

from dataclasses import replace

from testmap.models import TestInfo, TestOwnership
from testmap.ownership.components.base import ConfigComponent
from testmap.ownership.matcher import ComponentConfig, ComponentMatcher

# Some tests carry a misspelled skip marker for OVN.
MISSPELLED_OVN_SKIP = "Skipped:Network/OVNKuberenetes"

# Tests skipped on every network but OVN are ours.
SKIPPED_ON_OTHER_NETWORKS = ComponentMatcher(
    sig="sig-network",
    include_substrings=["Skipped:Network/"],
    exclude_substrings=["Skipped:Network/OVNKubernetes"],
)

OVN_KUBERNETES = ComponentConfig(
    name="Networking / ovn-kubernetes",
    default_jira_component="Networking / ovn-kubernetes",
    matchers=[
        SKIPPED_ON_OTHER_NETWORKS,
        ComponentMatcher(include_substrings=["ovn-kubernetes"], priority=1),
        ComponentMatcher(suite="OVN related networking scenarios"),
        ComponentMatcher(suite="OVNKubernetes IPsec related networking scenarios"),
        ComponentMatcher(suite="OVNKubernetes Windows Container related networking scenarios"),
        ComponentMatcher(suite="SDN/OVN metrics related networking scenarios"),
        ComponentMatcher(suite="ipv6 dual stack cluster test scenarios"),
        ComponentMatcher(suite="sdn2ovn migration testing"),
    ],
    test_renames={
        "[Networking][invariant] alert/KubePodNotReady should not be at or above info "
        "in ns/openshift-ovn-kubernetes": "[bz-Networking][invariant] alert/KubePodNotReady "
        "should not be at or above info in ns/openshift-ovn-kubernetes",
        "[Networking][invariant] alert/KubePodNotReady should not be at or above pending "
        "in ns/openshift-ovn-kubernetes": "[bz-Networking][invariant] alert/KubePodNotReady "
        "should not be at or above pending in ns/openshift-ovn-kubernetes",
    },
    variants=["Network:ovn"],
    capability_markers={
        "IPsec": "IPsec",
        "UserDefinedPrimaryNetworks": "User Defined Networks",
    },
)

ROUTER = ComponentConfig(
    name="Networking / router",
    default_jira_component="Networking / router",
    operators=["ingress"],
    matchers=[
        ComponentMatcher(include_substrings=["bz-Routing"]),
        ComponentMatcher(sig="sig-network", include_substrings=["Feature:Router"]),
        ComponentMatcher(sig="sig-network-edge", include_substrings=["Feature:Router"]),
        ComponentMatcher(include_substrings=["ingress-to-", "disruption"]),
        ComponentMatcher(include_substrings=["openshift-ingress"]),
        ComponentMatcher(include_substrings=["via cluster ingress"]),
        ComponentMatcher(include_substrings=["Cluster frontend ingress"]),
    ],
    capability_markers={"Feature:Router": "Router"},
)


class OvnKubernetesComponent(ConfigComponent):
    """
    ovn-kubernetes rules, plus the misspelled OVN skip marker.

    A test skipped on OVN under either spelling is not claimed through the
    skip rule; the remaining rules still apply to it.
    """

    def identify_test(self, test: TestInfo) -> TestOwnership | None:
        if MISSPELLED_OVN_SKIP in test.name:
            matchers = [m for m in self.config.matchers if m is not SKIPPED_ON_OTHER_NETWORKS]
            return ConfigComponent(replace(self.config, matchers=matchers)).identify_test(test)
        return super().identify_test(test)


def ovn_kubernetes() -> OvnKubernetesComponent:
    return OvnKubernetesComponent(OVN_KUBERNETES)


def router() -> ConfigComponent:
    return ConfigComponent(ROUTER)
