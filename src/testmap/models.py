"""
Ownership records.

TestInfo is the input descriptor for a single test. TestOwnership and
VariantMapping are the records written to the mapping tables and to the
local JSON snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

TEST_OWNERSHIP_KIND = "TestOwnership"
TEST_OWNERSHIP_API_VERSION = "v1"
VARIANT_MAPPING_KIND = "VariantMapping"
VARIANT_MAPPING_API_VERSION = "v1"


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class TestInfo:
    """A test as reported by the test corpus: its name and suite."""

    __test__: ClassVar[bool] = False

    name: str
    suite: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "suite": self.suite}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestInfo:
        return cls(name=data["name"], suite=data.get("suite") or "")


@dataclass
class TestOwnership:
    """Resolved owner of a single test."""

    __test__: ClassVar[bool] = False

    name: str
    id: str = ""
    suite: str = ""
    product: str = ""
    component: str = ""
    jira_component: str = ""
    jira_component_id: int | None = None
    capabilities: list[str] = field(default_factory=list)
    priority: int = 0
    staff_approved_obsolete: bool = False
    kind: str = ""
    api_version: str = ""
    created_at: datetime | None = None

    def identity(self) -> str:
        return self.id

    def to_row(self) -> dict[str, Any]:
        """Column values for the test mapping table."""
        return {
            "id": self.id,
            "name": self.name,
            "suite": self.suite,
            "product": self.product,
            "component": self.component,
            "jira_component": self.jira_component,
            "jira_component_id": self.jira_component_id,
            "capabilities": list(self.capabilities),
            "priority": self.priority,
            "staff_approved_obsolete": self.staff_approved_obsolete,
            "kind": self.kind,
            "api_version": self.api_version,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> TestOwnership:
        return cls(
            id=row.get("id") or "",
            name=row["name"],
            suite=row.get("suite") or "",
            product=row.get("product") or "",
            component=row.get("component") or "",
            jira_component=row.get("jira_component") or "",
            jira_component_id=row.get("jira_component_id"),
            capabilities=list(row.get("capabilities") or []),
            priority=row.get("priority") or 0,
            staff_approved_obsolete=bool(row.get("staff_approved_obsolete")),
            kind=row.get("kind") or "",
            api_version=row.get("api_version") or "",
            created_at=_parse_datetime(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data = self.to_row()
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data

    from_dict = from_row


@dataclass
class VariantMapping:
    """Owner of a CI job variant, identified by category and value."""

    variant_category: str
    variant_value: str
    jira_project: str = ""
    jira_component: str = ""
    product: str = ""
    kind: str = ""
    api_version: str = ""
    created_at: datetime | None = None

    def identity(self) -> str:
        return variant_identity(self.variant_category, self.variant_value)

    def to_row(self) -> dict[str, Any]:
        """Column values for the variant mapping table."""
        return {
            "variant_category": self.variant_category,
            "variant_value": self.variant_value,
            "jira_project": self.jira_project,
            "jira_component": self.jira_component,
            "product": self.product,
            "kind": self.kind,
            "api_version": self.api_version,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> VariantMapping:
        return cls(
            variant_category=row["variant_category"],
            variant_value=row["variant_value"],
            jira_project=row.get("jira_project") or "",
            jira_component=row.get("jira_component") or "",
            product=row.get("product") or "",
            kind=row.get("kind") or "",
            api_version=row.get("api_version") or "",
            created_at=_parse_datetime(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data = self.to_row()
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data

    from_dict = from_row


def variant_identity(category: str, value: str) -> str:
    """Identity string of a variant, e.g. ``Network:ovn``."""
    return f"{category}:{value}"
