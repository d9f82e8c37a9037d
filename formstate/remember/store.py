"""Stores for remembered form snapshots.

A remembered form writes its data and errors under its remember key and
reads them back when a form with the same key is created again.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import jsonschema

from formstate.core.compare import deep_copy
from formstate.core.models import RememberedSnapshot
from formstate.io import read_json, write_json
from formstate.remember.schema import SNAPSHOT_SCHEMA

logger = logging.getLogger(__name__)


class SnapshotValidationError(Exception):
    """Raised when a stored snapshot fails schema validation."""

    pass


@runtime_checkable
class RememberStore(Protocol):
    """Protocol for snapshot persistence backends."""

    def load(self, key: str) -> RememberedSnapshot | None:
        """Return the snapshot stored under ``key``, or None."""
        ...

    def save(self, key: str, snapshot: RememberedSnapshot) -> None:
        """Store ``snapshot`` under ``key``, replacing any previous one."""
        ...

    def forget(self, key: str) -> bool:
        """Drop the snapshot under ``key``. Returns True if one existed."""
        ...


class MemoryRememberStore:
    """Keeps snapshots in a dict for the lifetime of the process."""

    def __init__(self) -> None:
        self._snapshots: dict[str, RememberedSnapshot] = {}

    def load(self, key: str) -> RememberedSnapshot | None:
        snapshot = self._snapshots.get(key)
        return snapshot.model_copy(deep=True) if snapshot is not None else None

    def save(self, key: str, snapshot: RememberedSnapshot) -> None:
        self._snapshots[key] = snapshot.model_copy(deep=True)

    def forget(self, key: str) -> bool:
        return self._snapshots.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._snapshots)


class FileRememberStore:
    """Stores one JSON document per remember key in a local directory."""

    def __init__(self, storage_path: Path | str) -> None:
        """Initialize the store.

        Args:
            storage_path: Directory where snapshots are stored.
                          Will be created if it doesn't exist.
        """
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _get_snapshot_path(self, key: str) -> Path:
        """Get the path to a snapshot file."""
        # Sanitize key for filesystem (replace problematic chars)
        safe_key = key.replace("/", "_").replace(":", "_").replace("\\", "_")
        return self.storage_path / f"{safe_key}.json"

    def load(self, key: str) -> RememberedSnapshot | None:
        """Load a snapshot.

        Raises:
            SnapshotValidationError: If the stored document is malformed.
        """
        path = self._get_snapshot_path(key)
        if not path.exists():
            return None

        try:
            document = read_json(path)
        except ValueError as e:
            raise SnapshotValidationError(str(e)) from e

        validate_document(document, source=str(path))
        if document["remember_key"] != key:
            logger.warning(
                "Snapshot at %s belongs to key %r, not %r; ignoring",
                path,
                document["remember_key"],
                key,
            )
            return None

        return RememberedSnapshot.model_validate(document["snapshot"])

    def save(self, key: str, snapshot: RememberedSnapshot) -> None:
        """Persist a snapshot, keeping the original creation time."""
        path = self._get_snapshot_path(key)
        now = datetime.now(timezone.utc).isoformat()

        created_at = now
        if path.exists():
            try:
                created_at = read_json(path).get("meta", {}).get("created_at", now)
            except ValueError:
                logger.warning("Overwriting unreadable snapshot at %s", path)

        write_json(
            path,
            {
                "remember_key": key,
                "snapshot": deep_copy(snapshot.model_dump()),
                "meta": {"created_at": created_at, "updated_at": now},
            },
        )
        logger.debug("Saved snapshot for %r to %s", key, path)

    def forget(self, key: str) -> bool:
        path = self._get_snapshot_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def keys(self) -> list[str]:
        """List the remember keys with stored snapshots."""
        keys = []
        for path in sorted(self.storage_path.glob("*.json")):
            try:
                keys.append(read_json(path)["remember_key"])
            except (ValueError, KeyError, TypeError):
                logger.warning("Skipping unreadable snapshot file %s", path)
        return keys


def validate_document(document: object, source: str = "snapshot") -> None:
    """Validate a stored snapshot document against the snapshot schema.

    Raises:
        SnapshotValidationError: If the document does not match.
    """
    try:
        jsonschema.validate(document, SNAPSHOT_SCHEMA)
    except jsonschema.ValidationError as e:
        raise SnapshotValidationError(f"Invalid snapshot in {source}: {e.message}") from e
