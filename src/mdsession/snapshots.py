"""Bounded, persisted snapshots of document versions.

Snapshots are independent of undo/redo: they survive edits and document
switches and are meant for manual recovery across sessions.
"""

import logging

from .exceptions import LoadError, NotFoundError
from .models import Snapshot
from .storage import SNAPSHOTS_KEY, KeyValueStore
from .utils import generate_id, utcnow

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 100


class SnapshotManager:
    """Most-recent-first list of snapshots, capped at ``max_snapshots``."""

    def __init__(self, storage: KeyValueStore, max_snapshots: int = 20):
        self._storage = storage
        self.max_snapshots = max_snapshots
        self._snapshots: list[Snapshot] = []

    @property
    def snapshots(self) -> list[Snapshot]:
        return list(self._snapshots)

    def read(self) -> list[Snapshot]:
        """Parse the persisted list without changing the manager."""
        raw = self._storage.get(SNAPSHOTS_KEY, [])
        if not isinstance(raw, list):
            raise LoadError("Stored snapshots are not a list")
        try:
            return [Snapshot.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"Stored snapshots are corrupt: {e}") from e

    def adopt(self, snapshots: list[Snapshot]) -> list[Snapshot]:
        self._snapshots = list(snapshots[: self.max_snapshots])
        return self.snapshots

    def load(self) -> list[Snapshot]:
        """Replace the in-memory list with the persisted one.

        Raises LoadError if the stored data is malformed; the in-memory list
        is left untouched in that case.
        """
        return self.adopt(self.read())

    def _persist(self) -> None:
        self._storage.set(SNAPSHOTS_KEY, [s.to_dict() for s in self._snapshots])

    def create(self, title: str, content: str) -> Snapshot:
        snapshot = Snapshot(
            id=generate_id(),
            timestamp=utcnow(),
            title=title,
            summary=content[:SUMMARY_LENGTH],
            content=content,
        )
        self._snapshots.insert(0, snapshot)
        del self._snapshots[self.max_snapshots:]
        self._persist()
        logger.debug("Created snapshot %s (%d kept)", snapshot.id, len(self._snapshots))
        return snapshot

    def get(self, snapshot_id: str) -> Snapshot:
        for snapshot in self._snapshots:
            if snapshot.id == snapshot_id:
                return snapshot
        raise NotFoundError(f"Snapshot not found: {snapshot_id}")

    def delete(self, snapshot_id: str) -> None:
        snapshot = self.get(snapshot_id)
        self._snapshots.remove(snapshot)
        self._persist()

    def __len__(self) -> int:
        return len(self._snapshots)
