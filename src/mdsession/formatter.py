"""Text transformations and derived views over markdown content."""

import re
from typing import Optional

from .models import DocumentStats, HeadingNode
from .utils import count_paragraphs, count_words, reading_time, slugify

_FENCE_MARKER = re.compile(r"^[ \t]*```")
_HEADING_SPACING = re.compile(r"^(#{1,6})(?!#)[ \t]*(\S.*?)[ \t]*$")
_BULLET_SPACING = re.compile(r"^([ \t]*)([-*+])[ \t]+(\S.*?)[ \t]*$")
_ORDERED_SPACING = re.compile(r"^([ \t]*)(\d+)\.[ \t]+(\S.*?)[ \t]*$")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")
_FENCED_BLOCK = re.compile(r"^```(\w*)[ \t]*\n([\s\S]*?)\n```[ \t]*$", re.MULTILINE)
_HEADING = re.compile(r"^(#{1,6})\s+(.+)")
_MARKDOWN_PUNCTUATION = re.compile(r"[#*`_~\[\]()]")


def format_document(text: str) -> str:
    """Normalize cosmetic markdown spacing.

    Idempotent: heading and list marker spacing, at most one blank line
    between blocks, no blank edges inside code fences. Lines inside code
    fences are not touched by the heading and list rules.
    """
    lines = []
    in_fence = False
    for line in text.split("\n"):
        if _FENCE_MARKER.match(line):
            in_fence = not in_fence
            lines.append(line)
            continue
        if not in_fence:
            line = _HEADING_SPACING.sub(r"\1 \2", line)
            line = _BULLET_SPACING.sub(r"\1\2 \3", line)
            line = _ORDERED_SPACING.sub(r"\1\2. \3", line)
        lines.append(line)

    formatted = "\n".join(lines)
    formatted = _EXTRA_BLANK_LINES.sub("\n\n", formatted)
    return _FENCED_BLOCK.sub(_trim_fence, formatted)


def _trim_fence(match: re.Match) -> str:
    lang = match.group(1)
    code = match.group(2).strip("\n").rstrip()
    return f"```{lang}\n{code}\n```"


def search_and_replace(
    text: str,
    pattern: str,
    replacement: str,
    case_sensitive: bool = False,
    whole_word: bool = False,
    use_regex: bool = False,
) -> str:
    """Replace every match of pattern in text.

    With ``use_regex`` the pattern and replacement follow ``re.sub`` rules
    (so ``\\1`` refers to a group); otherwise both are literal. Raises
    ``re.error`` for an invalid regular expression.
    """
    source = pattern if use_regex else re.escape(pattern)
    if whole_word:
        source = rf"\b(?:{source})\b"
    compiled = re.compile(source, 0 if case_sensitive else re.IGNORECASE)
    if use_regex:
        return compiled.sub(replacement, text)
    return compiled.sub(lambda _m: replacement, text)


def document_structure(text: str) -> list[HeadingNode]:
    """Build the heading outline of a document.

    Each heading becomes a child of the nearest preceding heading with a
    strictly lower level; headings with no such ancestor are roots.
    """
    roots: list[HeadingNode] = []
    stack: list[HeadingNode] = []
    for number, line in enumerate(text.split("\n"), start=1):
        match = _HEADING.match(line)
        if not match:
            continue
        title = match.group(2).strip()
        node = HeadingNode(
            level=len(match.group(1)),
            title=title,
            id=slugify(title),
            line=number,
        )
        while stack and stack[-1].level >= node.level:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)
    return roots


def strip_markdown(text: str) -> str:
    """Drop markdown punctuation characters, leaving plain text."""
    return _MARKDOWN_PUNCTUATION.sub("", text)


def compute_stats(text: str) -> DocumentStats:
    words = count_words(text)
    return DocumentStats(
        characters=len(text),
        words=words,
        lines=len(text.split("\n")),
        paragraphs=count_paragraphs(text),
        reading_time=reading_time(words),
    )


def selection_stats(text: str) -> Optional[dict]:
    """Character, word and line counts for a selection (None if empty)."""
    if not text:
        return None
    return {
        "chars": len(text),
        "words": count_words(text),
        "lines": len(text.split("\n")),
    }
