"""Rename-resistant test identifiers."""

from __future__ import annotations

import hashlib

from testmap.models import TestInfo


def stable_id(test: TestInfo, stable_name: str | None = None) -> str:
    """
    Hash a test's suite and stable name into an identifier.

    The stable name defaults to the test's current name. Components that
    track renames pass the historical name instead so the identifier stays
    constant across a rename.
    """
    name = stable_name or test.name
    return hashlib.md5(f"{test.suite}.{name}".encode(), usedforsecurity=False).hexdigest()
