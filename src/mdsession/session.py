"""Session facade: the operations an editor UI drives.

A Session composes the document store, undo/redo history, snapshots, the
HTML renderer and autosave. Everything runs on the caller's thread; the
only deferred work is the autosave timers, which run on the scheduler's
event loop.
"""

import dataclasses
import json
import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from .config import Config
from .documents import DocumentStore
from .exceptions import ConfigError, ExportError, LoadError, MdSessionError, NotFoundError
from .formatter import (
    compute_stats,
    document_structure,
    format_document,
    search_and_replace,
    selection_stats,
    strip_markdown,
)
from .history import HistoryManager
from .models import Document, DocumentStats, EditorSettings, HeadingNode, Snapshot
from .render import Converter, HtmlRenderer
from .scheduler import AsyncioScheduler, AutosaveScheduler, Scheduler
from .snapshots import SnapshotManager
from .storage import SETTINGS_KEY, THEME_KEY, KeyValueStore
from .templates import render_template
from .themes import DEFAULT_THEME, Theme, get_theme, is_known_theme
from .utils import format_timestamp

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("markdown", "html", "text", "json")


class Session:
    """Editing session over a persisted document collection."""

    def __init__(
        self,
        storage: KeyValueStore,
        config: Optional[Config] = None,
        scheduler: Optional[Scheduler] = None,
        converters: Optional[Iterable[Converter]] = None,
    ):
        self.config = config or Config()
        self.storage = storage
        self.store = DocumentStore(storage, default_title=self.config.default_title)
        self.history = HistoryManager(max_size=self.config.max_history)
        self.snapshot_manager = SnapshotManager(storage, self.config.max_snapshots)
        self.renderer = HtmlRenderer(converters, cache_size=self.config.render_cache_size)
        self.settings = EditorSettings()
        self.theme = DEFAULT_THEME
        self.last_error: Optional[MdSessionError] = None
        self.autosave = AutosaveScheduler(
            scheduler or AsyncioScheduler(),
            save=self._autosave,
            is_dirty=lambda: self.store.working.dirty,
            debounce_ms=self.config.debounce_ms,
            interval_ms=self.settings.autosave_interval,
        )

    # ------------------------------------------------------------------
    # Working state
    # ------------------------------------------------------------------

    @property
    def content(self) -> str:
        return self.store.working.content

    @property
    def title(self) -> str:
        return self.store.working.title

    @property
    def tags(self) -> list[str]:
        return list(self.store.working.tags)

    @property
    def created_at(self) -> Optional[datetime]:
        return self.store.working.created_at

    @property
    def modified_at(self) -> Optional[datetime]:
        return self.store.working.modified_at

    @property
    def active_id(self) -> Optional[str]:
        return self.store.active_id

    @property
    def active_document(self) -> Optional[Document]:
        return self.store.active_document

    @property
    def documents(self) -> list[Document]:
        return self.store.documents

    @property
    def has_unsaved_changes(self) -> bool:
        return self.store.working.dirty

    @property
    def last_saved(self) -> Optional[datetime]:
        return self.store.last_saved

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def snapshots(self) -> list[Snapshot]:
        return self.snapshot_manager.snapshots

    @property
    def current_theme(self) -> Theme:
        return get_theme(self.theme)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """Load persisted state and start autosave.

        Returns False if persisted state could not be read; the failure is
        logged and kept on ``last_error`` and in-memory state is unchanged.
        Everything is parsed before any of it replaces the current state.
        """
        try:
            theme = self.storage.get(THEME_KEY, DEFAULT_THEME)
            try:
                settings = EditorSettings.from_dict(self.storage.get(SETTINGS_KEY, {}))
            except (TypeError, ValueError) as e:
                raise LoadError(f"Stored settings are corrupt: {e}") from e
            documents = self.store.read()
            snapshots = self.snapshot_manager.read()
        except LoadError as e:
            logger.error("Failed to load editor state: %s", e)
            self.last_error = e
            return False

        self.theme = theme if is_known_theme(theme) else DEFAULT_THEME
        self.settings = settings
        self.snapshot_manager.adopt(snapshots)
        self.store.adopt(documents)
        if self.store.active_id is None and len(self.store):
            self._activate(self.store.documents[0].id)
        if self.settings.autosave:
            self.start_autosave()
        self.last_error = None
        logger.info(
            "Session ready: %d document(s), %d snapshot(s)",
            len(self.store), len(self.snapshot_manager),
        )
        return True

    def close(self) -> None:
        """Flush unsaved changes and cancel all timers."""
        try:
            if self.store.working.dirty and self.store.active_id is not None:
                self.save(create_snapshot=False)
        finally:
            self.autosave.shutdown()

    def start_autosave(self) -> None:
        self.autosave.start(self.settings.autosave_interval)

    def stop_autosave(self) -> None:
        self.autosave.shutdown()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def update_content(self, text) -> bool:
        """Replace the working content. Returns False if nothing changed."""
        text = "" if text is None else str(text)
        if text == self.store.working.content:
            return False

        self.history.record(text)
        self.store.working.content = text
        self.store.working.dirty = True
        self.renderer.clear()
        if self.settings.autosave:
            self.autosave.trigger()
        return True

    def _apply(self, content: str) -> None:
        self.store.working.content = content
        self.store.working.dirty = True
        self.renderer.clear()

    def undo(self) -> bool:
        content = self.history.undo()
        if content is None:
            return False
        self._apply(content)
        return True

    def redo(self) -> bool:
        content = self.history.redo()
        if content is None:
            return False
        self._apply(content)
        return True

    def set_title(self, title: str) -> None:
        self.store.working.title = title
        self.store.working.dirty = True

    def add_tag(self, tag: str) -> bool:
        tag = tag.strip()
        if not tag or tag in self.store.working.tags:
            return False
        self.store.working.tags.append(tag)
        self.store.working.dirty = True
        return True

    def remove_tag(self, tag: str) -> None:
        if tag not in self.store.working.tags:
            raise NotFoundError(f"Tag not found: {tag}")
        self.store.working.tags.remove(tag)
        self.store.working.dirty = True

    def insert_template(self, kind: str) -> bool:
        """Append a canned body (or use it as the content when blank)."""
        body = render_template(kind)
        if body is None:
            logger.debug("Unknown template kind: %s", kind)
            return False
        current = self.store.working.content
        if current.strip():
            return self.update_content(current + "\n\n" + body)
        return self.update_content(body)

    def format_document(self) -> bool:
        formatted = format_document(self.store.working.content)
        if formatted == self.store.working.content:
            return False
        return self.update_content(formatted)

    def search_and_replace(
        self,
        pattern: str,
        replacement: str,
        case_sensitive: bool = False,
        whole_word: bool = False,
        use_regex: bool = False,
    ) -> bool:
        """Replace all matches in the working content.

        Returns True if the content changed. An empty pattern or an invalid
        regular expression is treated as no match.
        """
        if not pattern:
            return False
        try:
            replaced = search_and_replace(
                self.store.working.content,
                pattern,
                replacement,
                case_sensitive=case_sensitive,
                whole_word=whole_word,
                use_regex=use_regex,
            )
        except re.error as e:
            logger.warning("Invalid search pattern %r: %s", pattern, e)
            return False
        if replaced == self.store.working.content:
            return False
        return self.update_content(replaced)

    def import_markdown(self, text: str) -> bool:
        self.update_content(text)
        return self.save()

    def clear_content(self) -> bool:
        self.update_content("")
        return self.save()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _activate(self, doc_id: str) -> Document:
        self.autosave.cancel_pending()
        doc = self.store.switch_to(doc_id)
        self.history.reset(self.store.working.content)
        self.renderer.clear()
        return doc

    def switch_document(self, doc_id: str) -> Document:
        """Activate another document, saving unsaved edits first."""
        return self._activate(doc_id)

    def create_document(self, title: Optional[str] = None, activate: bool = True) -> Document:
        doc = self.store.create(title)
        if activate:
            self._activate(doc.id)
        return doc

    def delete_document(self, doc_id: str) -> Document:
        was_active = self.store.active_id == doc_id
        try:
            return self.store.delete(doc_id)
        finally:
            if was_active and self.store.active_id is None:
                self.autosave.cancel_pending()
                self.history.reset("")
                self.renderer.clear()

    def rename_document(self, doc_id: str, title: str) -> Document:
        return self.store.rename(doc_id, title)

    def save(self, create_snapshot: bool = True) -> bool:
        """Persist theme, settings and the active document.

        An explicit save also records a snapshot. Returns False when there
        is no active document. Raises SaveError on rejected writes.
        """
        self.storage.set(THEME_KEY, self.theme)
        self.storage.set(SETTINGS_KEY, self.settings.to_dict())
        saved = self.store.save()
        if saved and create_snapshot:
            self.create_snapshot()
        return saved

    def _autosave(self) -> None:
        if not self.settings.autosave:
            return
        try:
            self.save(create_snapshot=False)
        except MdSessionError as e:
            logger.error("Autosave failed: %s", e)
            self.last_error = e

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def create_snapshot(self) -> Snapshot:
        working = self.store.working
        return self.snapshot_manager.create(
            working.title or self.config.default_title, working.content
        )

    def restore_snapshot(self, snapshot_id: str) -> Snapshot:
        """Load a snapshot's title and content into the working copy.

        The restored content is recorded as a new history entry, so the
        restore itself can be undone.
        """
        snapshot = self.snapshot_manager.get(snapshot_id)
        self.history.record(snapshot.content)
        self._apply(snapshot.content)
        self.store.working.title = snapshot.title
        return snapshot

    def delete_snapshot(self, snapshot_id: str) -> None:
        self.snapshot_manager.delete(snapshot_id)

    # ------------------------------------------------------------------
    # Rendering and derived views
    # ------------------------------------------------------------------

    def convert_to_html(self, text: Optional[str] = None) -> str:
        return self.renderer.render(self.store.working.content if text is None else text)

    def clear_html_cache(self) -> None:
        self.renderer.clear()

    def document_structure(self) -> list[HeadingNode]:
        return document_structure(self.store.working.content)

    def stats(self) -> DocumentStats:
        return compute_stats(self.store.working.content)

    def selection_stats(self, text: str) -> Optional[dict]:
        return selection_stats(text)

    def export_as(self, fmt: str) -> str:
        """Export the working document as markdown, html, text or json.

        Raises ExportError for any other format.
        """
        content = self.store.working.content
        if fmt == "markdown":
            return content
        if fmt == "html":
            return self.convert_to_html()
        if fmt == "text":
            return strip_markdown(content)
        if fmt == "json":
            stats = dataclasses.asdict(self.stats())
            return json.dumps(
                {
                    "title": self.store.working.title,
                    "content": content,
                    "tags": list(self.store.working.tags),
                    "createdAt": format_timestamp(self.store.working.created_at),
                    "modifiedAt": format_timestamp(self.store.working.modified_at),
                    "stats": {
                        "characters": stats["characters"],
                        "words": stats["words"],
                        "lines": stats["lines"],
                        "paragraphs": stats["paragraphs"],
                        "readingTime": stats["reading_time"],
                        "lastSaved": format_timestamp(self.store.last_saved),
                        "hasUnsavedChanges": self.store.working.dirty,
                    },
                },
                indent=2,
                ensure_ascii=False,
            )
        raise ExportError(
            f"Unsupported export format: {fmt!r}. Use one of: {', '.join(EXPORT_FORMATS)}."
        )

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def set_theme(self, theme_id: str) -> bool:
        if not is_known_theme(theme_id):
            logger.warning("Ignoring unknown theme: %s", theme_id)
            return False
        self.theme = theme_id
        self.storage.set(THEME_KEY, theme_id)
        return True

    def update_settings(self, **changes) -> EditorSettings:
        """Change editor settings, persist them and restart autosave."""
        try:
            settings = dataclasses.replace(self.settings, **changes)
        except TypeError as e:
            raise ConfigError(f"Unknown editor setting: {e}") from e
        try:
            settings.validate()
        except ValueError as e:
            raise ConfigError(f"Invalid editor setting: {e}") from e
        self.storage.set(SETTINGS_KEY, settings.to_dict())
        self.settings = settings
        if settings.autosave:
            self.start_autosave()
        else:
            self.stop_autosave()
        return settings
