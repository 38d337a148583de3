"""Document collection, active pointer and working copy."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .exceptions import LoadError, NotFoundError
from .models import Document
from .storage import DOCUMENTS_KEY, KeyValueStore
from .utils import generate_id, utcnow

logger = logging.getLogger(__name__)


@dataclass
class WorkingCopy:
    """Editable fields of the active document, plus the dirty flag."""

    content: str = ""
    title: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    dirty: bool = False


class DocumentStore:
    """Owns the documents and which one is being edited.

    Documents are kept most-recent-first. Edits go to ``working`` and only
    reach the stored record on ``save``.
    """

    def __init__(self, storage: KeyValueStore, default_title: str = "Untitled"):
        self._storage = storage
        self.default_title = default_title
        self._documents: list[Document] = []
        self.active_id: Optional[str] = None
        self.working = WorkingCopy()
        self.last_saved: Optional[datetime] = None

    @property
    def documents(self) -> list[Document]:
        return list(self._documents)

    @property
    def active_document(self) -> Optional[Document]:
        if self.active_id is None:
            return None
        return self._find(self.active_id)

    def _find(self, doc_id: str) -> Optional[Document]:
        for doc in self._documents:
            if doc.id == doc_id:
                return doc
        return None

    def get(self, doc_id: str) -> Document:
        doc = self._find(doc_id)
        if doc is None:
            raise NotFoundError(f"Document not found: {doc_id}")
        return doc

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def read(self) -> list[Document]:
        """Parse the persisted collection without changing the store.

        Raises LoadError for unreadable or malformed data.
        """
        raw = self._storage.get(DOCUMENTS_KEY, [])
        if not isinstance(raw, list):
            raise LoadError("Stored documents are not a list")
        try:
            return [Document.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"Stored documents are corrupt: {e}") from e

    def adopt(self, documents: list[Document]) -> list[Document]:
        """Replace the collection with documents, seeding one if empty."""
        self._documents = list(documents)
        if self.active_id is not None and self._find(self.active_id) is None:
            self._clear_working()
        logger.debug("Loaded %d document(s)", len(self._documents))

        if not self._documents:
            self.create(self.default_title)
        return self.documents

    def load(self) -> list[Document]:
        """Load the persisted collection, seeding one document if empty.

        Raises LoadError for malformed data without touching in-memory state.
        """
        return self.adopt(self.read())

    def persist(self, documents: Optional[list[Document]] = None) -> None:
        if documents is None:
            documents = self._documents
        self._storage.set(DOCUMENTS_KEY, [doc.to_dict() for doc in documents])

    # ------------------------------------------------------------------
    # Collection operations
    # ------------------------------------------------------------------

    def create(self, title: Optional[str] = None) -> Document:
        now = utcnow()
        doc = Document(
            id=generate_id(),
            title=title or self.default_title,
            created_at=now,
            modified_at=now,
        )
        self._documents.insert(0, doc)
        self.persist()
        logger.info("Created document %s (%s)", doc.id, doc.title)
        return doc

    def delete(self, doc_id: str) -> Document:
        """Remove a document.

        The shortened collection is written first; a SaveError leaves the
        document and any unsaved edits to it in place.
        """
        doc = self.get(doc_id)
        remaining = [d for d in self._documents if d is not doc]
        self.persist(remaining)
        self._documents = remaining
        if self.active_id == doc_id:
            self._clear_working()
        logger.info("Deleted document %s", doc_id)
        return doc

    def rename(self, doc_id: str, title: str) -> Document:
        doc = self.get(doc_id)
        doc.title = title
        if self.active_id == doc_id:
            self.working.title = title
        self.persist()
        return doc

    def switch_to(self, doc_id: str) -> Document:
        """Make doc_id the active document.

        Unsaved edits to the current document are saved first; a SaveError
        aborts the switch with the current document still active.
        """
        target = self.get(doc_id)
        if self.active_id is not None and self.working.dirty:
            self.save()

        self.active_id = target.id
        self.working = WorkingCopy(
            content=target.content or "",
            title=target.title or "",
            tags=list(target.tags),
            created_at=target.created_at,
            modified_at=target.modified_at,
        )
        return target

    def save(self) -> bool:
        """Write the working copy into the active document and persist.

        Returns False when there is no active document. On SaveError the
        dirty flag stays set.
        """
        doc = self.active_document
        if doc is None:
            return False

        doc.content = self.working.content
        doc.title = self.working.title or self.default_title
        doc.tags = list(self.working.tags)
        doc.modified_at = utcnow()
        self.persist()

        self.working.modified_at = doc.modified_at
        self.working.dirty = False
        self.last_saved = doc.modified_at
        logger.debug("Saved document %s", doc.id)
        return True

    def _clear_working(self) -> None:
        self.active_id = None
        self.working = WorkingCopy()

    def __len__(self) -> int:
        return len(self._documents)
