"""Key/value persistence backends.

Values are JSON-serializable. Reads of unreadable or corrupt data raise
LoadError and rejected writes raise SaveError; neither is retried here.
"""

import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .exceptions import LoadError, SaveError

logger = logging.getLogger(__name__)

THEME_KEY = "mdsession_theme"
SETTINGS_KEY = "mdsession_settings"
DOCUMENTS_KEY = "mdsession_documents"
SNAPSHOTS_KEY = "mdsession_snapshots"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """Abstract persistence interface."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default when absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key if present."""


class MemoryStore(KeyValueStore):
    """In-process store. Values are JSON round-tripped on write."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SaveError(f"Value for {key!r} is not JSON-serializable: {e}") from e

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise LoadError(f"Could not read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise LoadError(f"Corrupt data in {path}: {e}") from e
        if not text.strip():
            return default
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise LoadError(f"Corrupt data in {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise SaveError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SaveError(f"Could not write {path}: {e}") from e
        logger.debug("Wrote %s (%d bytes)", path, len(payload))

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise SaveError(f"Could not remove {path}: {e}") from e
