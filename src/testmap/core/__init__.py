"""Core modules for testmap - error taxonomy and exit codes."""

from testmap.core.errors import (
    ConfigurationError,
    ConflictError,
    ExitCode,
    IdentificationError,
    JiraLookupError,
    SchemaMigrationError,
    StoreError,
    TestMapError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "TestMapError",
    "ConfigurationError",
    "ConflictError",
    "IdentificationError",
    "StoreError",
    "SchemaMigrationError",
    "JiraLookupError",
    "format_error_message",
    "main_with_error_handling",
]
