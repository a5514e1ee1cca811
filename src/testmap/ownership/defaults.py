"""Default values applied to ownership records."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROJECT = "OCPBUGS"
DEFAULT_COMPONENT = "Unknown"
DEFAULT_CAPABILITY = "Other"
DEFAULT_PRODUCT = "OpenShift"


@dataclass(frozen=True)
class OwnershipDefaults:
    """Fallback values for fields a claim leaves empty."""

    component: str = DEFAULT_COMPONENT
    capability: str = DEFAULT_CAPABILITY
    product: str = DEFAULT_PRODUCT
    project: str = DEFAULT_PROJECT
