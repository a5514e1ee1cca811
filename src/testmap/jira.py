"""
JIRA component lookup.

Ownership records carry the numeric ID of their JIRA component when it is
known. IDs are fetched once per run from the JIRA project's component list.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from testmap.core.errors import JiraLookupError

logger = structlog.get_logger()


class JiraComponentClient:
    """
    Fetches JIRA component IDs for a project.

    Args:
        base_url: JIRA server URL
        project: Project key whose components are listed
        token: Personal access token (optional)
        timeout: Request timeout in seconds
        transport: Custom httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        project: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.project = project
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_component_ids(self) -> dict[str, int]:
        """
        Return a mapping of component name to numeric ID.

        Raises:
            JiraLookupError: If the request fails or the response is malformed
        """
        url = f"{self.base_url}/rest/api/2/project/{self.project}/components"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url, headers=self._headers())
                response.raise_for_status()
                payload: Any = response.json()
        except httpx.HTTPStatusError as e:
            raise JiraLookupError(
                f"JIRA returned HTTP {e.response.status_code} listing components",
                details={"project": self.project, "status": e.response.status_code},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise JiraLookupError(
                f"could not fetch JIRA components: {e}", details={"project": self.project}
            ) from e

        if not isinstance(payload, list):
            raise JiraLookupError(
                "unexpected JIRA components response", details={"project": self.project}
            )

        ids: dict[str, int] = {}
        for item in payload:
            try:
                ids[item["name"]] = int(item["id"])
            except (KeyError, TypeError, ValueError):
                logger.warning("jira_component_skipped", project=self.project, item=item)

        logger.info("jira_components_fetched", project=self.project, components=len(ids))
        return ids
