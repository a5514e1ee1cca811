"""
testmap configuration.

Pydantic-based settings loaded from TESTMAP_* environment variables and
an optional .env file, plus run-mode validation.
"""

from testmap.config.settings import (
    MODE_LOCAL,
    MODE_WAREHOUSE,
    MODES,
    Settings,
    get_settings,
    load_settings,
    validate_run_mode,
)

__all__ = [
    "MODE_LOCAL",
    "MODE_WAREHOUSE",
    "MODES",
    "Settings",
    "get_settings",
    "load_settings",
    "validate_run_mode",
]
