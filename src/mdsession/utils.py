"""Utility functions for mdsession."""

import html
import math
import re
import uuid
from datetime import datetime, timezone
from typing import Optional

WORDS_PER_MINUTE = 200


def generate_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ISO-8601 (None passes through)."""
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string, accepting a trailing 'Z'.

    Missing values resolve to the current time so that records written by
    older clients still load.
    """
    if value is None or value == "":
        return utcnow()
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def slugify(text: str) -> str:
    """Convert a heading title to an anchor id."""
    text = text.strip().lower()
    text = re.sub(r"[^\w\s-]", "", text)
    return re.sub(r"\s+", "-", text)


def escape_html(text: str) -> str:
    """Escape &, <, >, and both quote characters."""
    return html.escape(text, quote=True)


def count_words(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    return len(text.split())


def count_paragraphs(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    return len([p for p in re.split(r"\n\s*\n", text) if p.strip()])


def reading_time(words: int) -> int:
    """Estimated reading time in whole minutes, rounded up."""
    return math.ceil(words / WORDS_PER_MINUTE)
