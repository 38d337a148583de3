"""Linear undo/redo log for the active document."""

from typing import Optional


class HistoryManager:
    """Content versions with a cursor.

    A new edit after one or more undos discards everything past the cursor,
    so there is never more than one redo branch. The log is capped at
    ``max_size`` entries by dropping the oldest.
    """

    def __init__(self, initial: str = "", max_size: int = 50):
        self.max_size = max_size
        self._entries: list[str] = [initial]
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def current(self) -> str:
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def record(self, content: str) -> bool:
        """Append content as the newest version. Returns False if unchanged."""
        if content == self._entries[self._index]:
            return False
        del self._entries[self._index + 1:]
        self._entries.append(content)
        if len(self._entries) > self.max_size:
            del self._entries[: len(self._entries) - self.max_size]
        self._index = len(self._entries) - 1
        return True

    def undo(self) -> Optional[str]:
        """Step back one version and return it, or None at the oldest entry."""
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[str]:
        """Step forward one version and return it, or None at the newest entry."""
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index]

    def reset(self, content: str = "") -> None:
        self._entries = [content]
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)
