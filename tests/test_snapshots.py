"""Tests for the snapshot manager."""

import pytest

from mdsession.exceptions import LoadError, NotFoundError
from mdsession.snapshots import SnapshotManager
from mdsession.storage import SNAPSHOTS_KEY


class TestSnapshotManager:
    def test_create_prepends_and_persists(self, storage):
        manager = SnapshotManager(storage)
        first = manager.create("Doc", "one")
        second = manager.create("Doc", "two")
        assert [s.id for s in manager.snapshots] == [second.id, first.id]
        assert [s["id"] for s in storage.get(SNAPSHOTS_KEY)] == [second.id, first.id]

    def test_summary_is_first_100_chars(self, storage):
        manager = SnapshotManager(storage)
        snap = manager.create("Doc", "x" * 250)
        assert snap.summary == "x" * 100
        assert len(snap.content) == 250

    def test_bounded_at_20(self, storage):
        """The 21st snapshot evicts the oldest."""
        manager = SnapshotManager(storage, max_snapshots=20)
        created = [manager.create("Doc", f"v{i}") for i in range(21)]
        assert len(manager) == 20
        assert created[0].id not in [s.id for s in manager.snapshots]
        assert manager.snapshots[0].id == created[-1].id
        assert len(storage.get(SNAPSHOTS_KEY)) == 20

    def test_delete(self, storage):
        manager = SnapshotManager(storage)
        keep = manager.create("Doc", "keep")
        drop = manager.create("Doc", "drop")
        manager.delete(drop.id)
        assert [s.id for s in manager.snapshots] == [keep.id]
        assert [s["id"] for s in storage.get(SNAPSHOTS_KEY)] == [keep.id]

    def test_unknown_id_raises(self, storage):
        manager = SnapshotManager(storage)
        with pytest.raises(NotFoundError):
            manager.get("missing")
        with pytest.raises(NotFoundError):
            manager.delete("missing")

    def test_load_round_trip(self, storage):
        SnapshotManager(storage).create("Doc", "saved text")
        reloaded = SnapshotManager(storage)
        reloaded.load()
        assert reloaded.snapshots[0].content == "saved text"
        assert reloaded.snapshots[0].title == "Doc"

    def test_load_corrupt_raises(self, storage):
        storage.set(SNAPSHOTS_KEY, "garbage")
        with pytest.raises(LoadError):
            SnapshotManager(storage).load()
