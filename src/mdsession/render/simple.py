"""Regex-based fallback converter.

Covers a deliberately partial subset of markdown: code fences, inline code,
h1-h3 headings, bold, italic, links, flat lists, blockquotes and paragraphs.
Rules run in a fixed order over HTML-escaped text. Code is swapped out for
placeholders as soon as it is rendered so later rules cannot touch it.
"""

import html
import re

from .base import Converter
from .highlight import highlight_code

_FENCE = re.compile(r"```(\w*)\n?([\s\S]*?)\n?```")
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_HEADINGS = (
    (re.compile(r"^### (.*)$", re.MULTILINE), "h3"),
    (re.compile(r"^## (.*)$", re.MULTILINE), "h2"),
    (re.compile(r"^# (.*)$", re.MULTILINE), "h1"),
)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(?=\S)(.+?)(?<=\S)\*")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
# Same schemes markdown-it refuses to link
_UNSAFE_LINK = re.compile(r"^(?:javascript|vbscript|file|data):", re.IGNORECASE)
_UNORDERED_ITEM = re.compile(r"^[*-] (.+)$")
_ORDERED_ITEM = re.compile(r"^\d+\. (.+)$")
_BLOCKQUOTE = re.compile(r"^&gt; ?(.*)$", re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_BLOCK_LINE = re.compile(r"^(?:</?(?:h[1-6]|ul|ol|li|blockquote|pre|div)\b|\x00B\d+\x00$)")
_PLACEHOLDER = re.compile(r"\x00([BI])(\d+)\x00")


class SimpleConverter(Converter):
    """Hand-written converter used when markdown-it fails."""

    @property
    def name(self) -> str:
        return "simple"

    def convert(self, text: str) -> str:
        blocks: list[str] = []
        inlines: list[str] = []

        out = text.replace("\r\n", "\n").replace("\x00", "")
        out = html.escape(out, quote=True)

        def fence(match: re.Match) -> str:
            lang = match.group(1)
            code = match.group(2).strip()
            highlighted = highlight_code(html.unescape(code), lang)
            body = highlighted.rstrip("\n") if highlighted is not None else code
            label = lang or "plaintext"
            blocks.append(
                f'<pre><code class="language-{label}" data-language="{label}">'
                f"{body}</code></pre>"
            )
            return f"\n\x00B{len(blocks) - 1}\x00\n"

        def inline_code(match: re.Match) -> str:
            inlines.append(f"<code>{match.group(1)}</code>")
            return f"\x00I{len(inlines) - 1}\x00"

        out = _FENCE.sub(fence, out)
        out = _INLINE_CODE.sub(inline_code, out)
        for pattern, tag in _HEADINGS:
            out = pattern.sub(rf"<{tag}>\1</{tag}>", out)
        out = _BOLD.sub(r"<strong>\1</strong>", out)
        out = _ITALIC.sub(r"<em>\1</em>", out)
        out = _LINK.sub(_link, out)
        out = _wrap_lists(out)
        out = _BLOCKQUOTE.sub(r"<blockquote>\1</blockquote>", out)
        out = _paragraphs(out)

        def restore(match: re.Match) -> str:
            store = blocks if match.group(1) == "B" else inlines
            return store[int(match.group(2))]

        return _PLACEHOLDER.sub(restore, out)


def _link(match: re.Match) -> str:
    label, url = match.group(1), match.group(2)
    if _UNSAFE_LINK.match(url):
        return match.group(0)
    return f'<a href="{url}">{label}</a>'


def _wrap_lists(text: str) -> str:
    """Turn list item lines into <li>, grouping runs into <ul>/<ol>."""
    out: list[str] = []
    current = None
    for line in text.split("\n"):
        match = _UNORDERED_ITEM.match(line)
        kind = "ul" if match else None
        if match is None:
            match = _ORDERED_ITEM.match(line)
            kind = "ol" if match else None
        if kind != current:
            if current:
                out.append(f"</{current}>")
            if kind:
                out.append(f"<{kind}>")
            current = kind
        out.append(f"<li>{match.group(1)}</li>" if match else line)
    if current:
        out.append(f"</{current}>")
    return "\n".join(out)


def _paragraphs(text: str) -> str:
    """Wrap runs of plain lines in <p>, joining their lines with <br>."""
    chunks = []
    for chunk in _PARAGRAPH_BREAK.split(text):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts: list[str] = []
        pending: list[str] = []
        for line in chunk.split("\n"):
            if _BLOCK_LINE.match(line.strip()):
                if pending:
                    parts.append("<p>" + "<br>".join(pending) + "</p>")
                    pending = []
                parts.append(line.strip())
            elif line.strip():
                pending.append(line)
        if pending:
            parts.append("<p>" + "<br>".join(pending) + "</p>")
        chunks.append("\n".join(parts))
    return "\n\n".join(chunks)
