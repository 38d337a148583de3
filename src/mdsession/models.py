"""Data models for mdsession."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Optional

from .utils import format_timestamp, parse_timestamp, utcnow


@dataclass
class Document:
    """A markdown document in the collection."""

    id: str
    title: str
    content: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "createdAt": format_timestamp(self.created_at),
            "modifiedAt": format_timestamp(self.modified_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Build a Document from its persisted form.

        Raises KeyError, TypeError or ValueError on malformed input; callers
        translate those into LoadError.
        """
        if not isinstance(data, dict):
            raise TypeError(f"document record must be an object, got {type(data).__name__}")
        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise TypeError("document tags must be a list")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            tags=[str(t) for t in tags],
            created_at=parse_timestamp(data.get("createdAt")),
            modified_at=parse_timestamp(data.get("modifiedAt")),
        )


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of a document's title and content."""

    id: str
    timestamp: datetime
    title: str
    summary: str
    content: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "title": self.title,
            "summary": self.summary,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        if not isinstance(data, dict):
            raise TypeError(f"snapshot record must be an object, got {type(data).__name__}")
        content = str(data.get("content") or "")
        return cls(
            id=str(data["id"]),
            timestamp=parse_timestamp(data.get("timestamp")),
            title=str(data.get("title") or ""),
            summary=str(data.get("summary") or content[:100]),
            content=content,
        )


@dataclass
class EditorSettings:
    """Persisted editor preferences."""

    tab_size: int = 2
    insert_spaces: bool = True
    word_wrap: bool = True
    line_numbers: bool = True
    spell_check: bool = False
    font_size: int = 16
    line_height: float = 1.6
    autosave: bool = True
    autosave_interval: int = 30_000  # milliseconds

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self) -> None:
        """Raise ValueError if a field holds a value of the wrong type."""
        for f in fields(self):
            value = getattr(self, f.name)
            expected = _SETTING_TYPES[f.name]
            # bool is an int subclass
            if isinstance(value, bool) and expected is not bool:
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if not isinstance(value, expected):
                raise ValueError(f"{f.name} has invalid value {value!r}")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EditorSettings":
        """Build settings from a persisted bundle, ignoring unknown keys.

        Raises TypeError if the bundle is not an object and ValueError if a
        known key holds a value of the wrong type.
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise TypeError("settings bundle must be an object")
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known})
        settings.validate()
        return settings


_SETTING_TYPES = {
    "tab_size": int,
    "insert_spaces": bool,
    "word_wrap": bool,
    "line_numbers": bool,
    "spell_check": bool,
    "font_size": int,
    "line_height": (int, float),
    "autosave": bool,
    "autosave_interval": int,
}


@dataclass
class HeadingNode:
    """One heading in a document outline."""

    level: int
    title: str
    id: str
    line: int
    children: list["HeadingNode"] = field(default_factory=list)


@dataclass
class DocumentStats:
    """Computed statistics for a piece of markdown text."""

    characters: int
    words: int
    lines: int
    paragraphs: int
    reading_time: int  # minutes at 200 words/minute
