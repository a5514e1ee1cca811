"""Installer / openshift-installer ownership rules."""

from testmap.ownership.components.base import ConfigComponent
from testmap.ownership.matcher import ComponentConfig, ComponentMatcher

OPENSHIFT_INSTALLER = ComponentConfig(
    name="Installer / openshift-installer",
    default_jira_component="Installer / openshift-installer",
    matchers=[
        ComponentMatcher(sig="sig-installer", priority=-1),
        ComponentMatcher(suite="cluster install"),
        ComponentMatcher(include_substrings=["install should succeed"]),
        ComponentMatcher(suite="Install and configuration related scenarios", priority=1),
        ComponentMatcher(suite="UPI GCP Tests"),
        ComponentMatcher(suite="fips"),
    ],
    variants=["Installer:ipi", "Installer:upi"],
    capability_markers={
        "install should succeed: overall": "Install",
        "install should succeed: infrastructure": "Infrastructure",
    },
)


def openshift_installer() -> ConfigComponent:
    return ConfigComponent(OPENSHIFT_INSTALLER)
