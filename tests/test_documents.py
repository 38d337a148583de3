"""Tests for the document store."""

from unittest.mock import patch

import pytest

from mdsession.documents import DocumentStore
from mdsession.exceptions import LoadError, NotFoundError, SaveError
from mdsession.storage import DOCUMENTS_KEY, MemoryStore


@pytest.fixture
def store(storage):
    s = DocumentStore(storage, default_title="Untitled")
    s.load()
    return s


class TestLoad:
    def test_empty_collection_is_seeded(self, storage):
        """Loading an empty collection creates and persists one document."""
        store = DocumentStore(storage)
        docs = store.load()
        assert len(docs) == 1
        assert docs[0].title == "Untitled"
        assert docs[0].content == ""
        assert len(storage.get(DOCUMENTS_KEY)) == 1

    def test_loads_persisted_documents(self):
        storage = MemoryStore({
            DOCUMENTS_KEY: [
                {"id": "1", "title": "One", "content": "# One", "tags": ["a"],
                 "createdAt": "2026-01-24T10:00:00.000Z", "modifiedAt": "2026-01-25T10:00:00Z"},
            ]
        })
        store = DocumentStore(storage)
        docs = store.load()
        assert [d.id for d in docs] == ["1"]
        assert docs[0].tags == ["a"]
        assert docs[0].modified_at.year == 2026

    def test_corrupt_collection_raises_load_error(self):
        """Malformed records raise LoadError and keep prior documents."""
        storage = MemoryStore()
        store = DocumentStore(storage)
        store.load()
        before = store.documents

        storage.set(DOCUMENTS_KEY, [{"title": "missing id"}])
        with pytest.raises(LoadError):
            store.load()
        assert store.documents == before

        storage.set(DOCUMENTS_KEY, {"not": "a list"})
        with pytest.raises(LoadError):
            store.load()


class TestCollection:
    def test_create_inserts_at_head(self, store):
        first = store.create("First")
        second = store.create("Second")
        assert [d.id for d in store.documents[:2]] == [second.id, first.id]
        assert second.created_at == second.modified_at

    def test_create_uses_default_title(self, store):
        assert store.create().title == "Untitled"

    def test_delete_active_clears_working_fields(self, store):
        doc = store.create("Doomed")
        store.switch_to(doc.id)
        store.working.content = "text"
        store.working.tags.append("x")

        store.delete(doc.id)

        assert store.active_id is None
        assert store.working.content == ""
        assert store.working.title == ""
        assert store.working.tags == []

    def test_delete_other_leaves_working_fields(self, store):
        keep = store.create("Keep")
        other = store.create("Other")
        store.switch_to(keep.id)
        store.working.content = "draft"

        store.delete(other.id)

        assert store.active_id == keep.id
        assert store.working.content == "draft"
        assert store.working.title == "Keep"

    def test_failed_delete_keeps_document_and_edits(self, store, storage):
        """A rejected write leaves memory matching what is on disk."""
        doc = store.create("Doomed")
        store.switch_to(doc.id)
        store.working.content = "unsaved"
        store.working.dirty = True

        with patch.object(storage, "set", side_effect=SaveError("disk full")):
            with pytest.raises(SaveError):
                store.delete(doc.id)

        assert doc.id in [d.id for d in store.documents]
        assert doc.id in [d["id"] for d in storage.get(DOCUMENTS_KEY)]
        assert store.active_id == doc.id
        assert store.working.content == "unsaved"
        assert store.working.dirty is True

    def test_delete_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.delete("nope")

    def test_rename_updates_working_title_when_active(self, store):
        doc = store.create("Old")
        store.switch_to(doc.id)
        store.rename(doc.id, "New")
        assert store.get(doc.id).title == "New"
        assert store.working.title == "New"


class TestSwitchAndSave:
    def test_switch_loads_working_copy(self, store):
        doc = store.create("Target")
        doc.content = "hello"
        doc.tags = ["t"]
        store.switch_to(doc.id)
        assert store.active_id == doc.id
        assert store.working.content == "hello"
        assert store.working.tags == ["t"]
        assert store.working.dirty is False

    def test_switch_saves_dirty_document_first(self, store, storage):
        """Unsaved edits are persisted before another document is loaded."""
        a = store.create("A")
        b = store.create("B")
        store.switch_to(a.id)
        store.working.content = "unsaved edit"
        store.working.dirty = True

        store.switch_to(b.id)

        persisted = {d["id"]: d for d in storage.get(DOCUMENTS_KEY)}
        assert persisted[a.id]["content"] == "unsaved edit"
        assert store.working.dirty is False

    def test_switch_to_unknown_keeps_current(self, store):
        doc = store.create("A")
        store.switch_to(doc.id)
        with pytest.raises(NotFoundError):
            store.switch_to("missing")
        assert store.active_id == doc.id

    def test_save_writes_back_and_clears_dirty(self, store):
        doc = store.create("A")
        store.switch_to(doc.id)
        store.working.content = "body"
        store.working.title = ""
        store.working.dirty = True

        assert store.save() is True
        assert doc.content == "body"
        assert doc.title == "Untitled"
        assert store.working.dirty is False
        assert store.last_saved == doc.modified_at

    def test_save_without_active_document(self, store):
        assert store.save() is False

    def test_failed_persist_keeps_dirty(self, store, storage):
        doc = store.create("A")
        store.switch_to(doc.id)
        store.working.content = "body"
        store.working.dirty = True

        with patch.object(storage, "set", side_effect=SaveError("disk full")):
            with pytest.raises(SaveError):
                store.save()
        assert store.working.dirty is True
