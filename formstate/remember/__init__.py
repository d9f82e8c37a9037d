"""Persistence of remembered form snapshots.

Provides the RememberStore protocol, an in-memory store for tests and
short-lived processes, and a JSON file store.
"""

from formstate.remember.schema import SNAPSHOT_SCHEMA
from formstate.remember.store import (
    FileRememberStore,
    MemoryRememberStore,
    RememberStore,
    SnapshotValidationError,
    validate_document,
)

__all__ = [
    "FileRememberStore",
    "MemoryRememberStore",
    "RememberStore",
    "SNAPSHOT_SCHEMA",
    "SnapshotValidationError",
    "validate_document",
]
