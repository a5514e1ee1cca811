"""Root test configuration."""

import logging
import os

import pytest
import structlog

from testmap.models import TestInfo
from testmap.ownership.components.base import ConfigComponent
from testmap.ownership.matcher import ComponentConfig, ComponentMatcher
from testmap.ownership.registry import ComponentRegistry


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep TESTMAP_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("TESTMAP_"):
            monkeypatch.delenv(key)


def build_component(name, *matchers, **kwargs):
    kwargs.setdefault("default_jira_component", name)
    return ConfigComponent(ComponentConfig(name=name, matchers=list(matchers), **kwargs))


@pytest.fixture
def make_component():
    """Factory for config-driven components with the given matchers."""
    return build_component


@pytest.fixture
def network_component():
    return build_component(
        "Networking / sdn",
        ComponentMatcher(sig="sig-network", capabilities=["Networking"]),
    )


@pytest.fixture
def suite_component():
    return build_component(
        "Suite Owner",
        ComponentMatcher(suite="X", priority=1, capabilities=["Suite"]),
    )


@pytest.fixture
def registry(network_component, suite_component):
    return ComponentRegistry([network_component, suite_component])


@pytest.fixture
def network_test():
    return TestInfo(name="[sig-network] pods should talk", suite="X")
