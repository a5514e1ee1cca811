"""
Test ownership resolution.

Every registered component is asked whether it claims a test. Claims are
normalized with defaults and the claim with the highest priority wins.
Two claims sharing the highest priority are a conflict: ownership is never
decided by registration order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor

import structlog

from testmap.core.errors import ConflictError, IdentificationError, TestMapError
from testmap.models import (
    TEST_OWNERSHIP_API_VERSION,
    TEST_OWNERSHIP_KIND,
    TestInfo,
    TestOwnership,
)
from testmap.ownership.components.base import BaseComponent
from testmap.ownership.defaults import OwnershipDefaults
from testmap.ownership.registry import ComponentRegistry
from testmap.ownership.stable_id import stable_id

logger = structlog.get_logger()


class TestIdentifier:
    """
    Resolves the owning component of individual tests.

    Args:
        registry: Components to query
        component_ids: JIRA component name -> numeric ID, best effort
        defaults: Values for fields a claim leaves empty
    """

    __test__ = False

    def __init__(
        self,
        registry: ComponentRegistry,
        component_ids: Mapping[str, int] | None = None,
        defaults: OwnershipDefaults | None = None,
    ) -> None:
        self.registry = registry
        self.component_ids = dict(component_ids or {})
        self.defaults = defaults or OwnershipDefaults()

    def identify(self, test: TestInfo) -> TestOwnership:
        """
        Resolve the owner of a single test.

        Returns:
            Exactly one TestOwnership; unclaimed tests belong to the
            default component

        Raises:
            IdentificationError: If a component fails while evaluating the test
            ConflictError: If the highest priority is shared by several claims
        """
        log = logger.bind(name=test.name, suite=test.suite)
        log.debug("identifying_test", components=len(self.registry))

        claims: list[TestOwnership] = []
        for component in self.registry:
            claim = self._claim(component, test)
            if claim is not None:
                log.debug("test_claimed", component=component.name, priority=claim.priority)
                claims.append(self.set_defaults(test, claim, component))

        if not claims:
            claims.append(
                self.set_defaults(test, TestOwnership(id=stable_id(test), name=test.name), None)
            )

        ownership = highest_priority(test, claims)
        ownership.capabilities = sorted(set(ownership.capabilities))
        return ownership

    def _claim(self, component: BaseComponent, test: TestInfo) -> TestOwnership | None:
        try:
            return component.identify_test(test)
        except TestMapError:
            raise
        except Exception as e:
            logger.error(
                "component_error", component=component.name, name=test.name, suite=test.suite
            )
            raise IdentificationError(
                f"component {component.name!r} failed to evaluate test: {e}",
                details={"component": component.name, "test": test.name, "suite": test.suite},
            ) from e

    def set_defaults(
        self,
        test: TestInfo,
        ownership: TestOwnership,
        component: BaseComponent | None,
    ) -> TestOwnership:
        """Fill in every field a claim may leave empty."""
        if not ownership.id and component is not None:
            ownership.id = stable_id(test, component.stable_id(test))

        ownership.kind = TEST_OWNERSHIP_KIND
        ownership.api_version = TEST_OWNERSHIP_API_VERSION

        if not ownership.product:
            ownership.product = self.defaults.product

        if not ownership.component:
            ownership.component = self.defaults.component

        if not ownership.jira_component:
            ownership.jira_component = self.defaults.component

        if ownership.jira_component in self.component_ids:
            ownership.jira_component_id = self.component_ids[ownership.jira_component]

        if not ownership.capabilities:
            ownership.capabilities = [self.defaults.capability]

        if not ownership.suite:
            ownership.suite = test.suite

        return ownership

    def map_tests(self, tests: Iterable[TestInfo], workers: int = 1) -> list[TestOwnership]:
        """
        Resolve ownership for a batch of tests.

        Failures do not stop the batch; every test is attempted and the
        batch fails at the end if any test could not be identified. Tests
        are independent, so ``workers > 1`` resolves them on a thread pool.

        Returns:
            One ownership per test, sorted by name then suite

        Raises:
            ConflictError: If any test had conflicting claims
            IdentificationError: If any test failed for another reason
        """
        tests = list(tests)
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(self._try_identify, tests))
        else:
            outcomes = [self._try_identify(test) for test in tests]

        ownerships: list[TestOwnership] = []
        failures: list[TestMapError] = []
        for outcome in outcomes:
            if isinstance(outcome, TestMapError):
                failures.append(outcome)
            else:
                ownerships.append(outcome)

        if failures:
            details = {
                "failed": len(failures),
                "total": len(tests),
                "first_failure": failures[0].message,
            }
            conflicts = [f for f in failures if isinstance(f, ConflictError)]
            if conflicts:
                raise ConflictError(
                    "ownership conflicts prevented tests from being identified",
                    details={**details, "conflicts": len(conflicts)},
                )
            raise IdentificationError(
                "encountered errors while trying to identify tests", details=details
            )

        ownerships.sort(key=lambda o: (o.name, o.suite))
        return ownerships

    def _try_identify(self, test: TestInfo) -> TestOwnership | TestMapError:
        try:
            return self.identify(test)
        except TestMapError as e:
            logger.warning(
                "test_identification_failed",
                name=test.name,
                suite=test.suite,
                error=e.message,
            )
            return e


def highest_priority(test: TestInfo, claims: list[TestOwnership]) -> TestOwnership:
    """
    Pick the claim with the strictly highest priority.

    Raises:
        ConflictError: If two or more claims share the highest priority
    """
    top = max(claim.priority for claim in claims)
    winners = [claim for claim in claims if claim.priority == top]
    if len(winners) > 1:
        components = sorted(claim.component for claim in winners)
        raise ConflictError(
            f"suite={test.suite!r} test={test.name!r} is claimed by "
            f"{', '.join(components)} - unable to resolve conflict -- please use priority field",
            details={"components": components, "priority": top},
        )
    return winners[0]
