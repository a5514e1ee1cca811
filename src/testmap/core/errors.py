"""
Unified error handling for testmap commands.

This module provides the error taxonomy, exit codes, and error reporting
shared by the resolvers, the mapping-table store and the CLI.

Exit Codes:
- 0: Success
- 1: Warning (operation succeeded, follow-up needed, e.g. deferred prune)
- 10: Configuration error
- 11: Provider error (warehouse or JIRA failure)
- 13: Ownership conflict
- 14: Identification error (one or more tests could not be identified)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    CONFLICT_ERROR = 13
    IDENTIFICATION_ERROR = 14
    UNKNOWN_ERROR = 127


class TestMapError(Exception):
    """Base exception for testmap errors with exit code support."""

    __test__ = False

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(TestMapError):
    """Raised for invalid settings, flag combinations or component catalogs."""

    exit_code = ExitCode.CONFIG_ERROR


class ConflictError(TestMapError):
    """Raised when ownership of a test or variant is ambiguous."""

    exit_code = ExitCode.CONFLICT_ERROR


class IdentificationError(TestMapError):
    """Raised when a component fails to evaluate, or a batch had failures."""

    exit_code = ExitCode.IDENTIFICATION_ERROR


class StoreError(TestMapError):
    """Raised when the analytical store rejects an operation."""

    exit_code = ExitCode.PROVIDER_ERROR


class SchemaMigrationError(StoreError):
    """Raised when a remote table cannot be brought to the declared schema."""


class JiraLookupError(TestMapError):
    """Raised when JIRA component IDs cannot be fetched."""

    exit_code = ExitCode.PROVIDER_ERROR


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Exit codes:
        - TestMapError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except TestMapError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: TestMapError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
