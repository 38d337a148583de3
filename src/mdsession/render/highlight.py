"""Syntax highlighting for fenced code via Pygments."""

import logging
from functools import lru_cache
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

# Languages considered when a fence has no usable language tag.
DETECTABLE_LANGUAGES = (
    "javascript", "typescript", "python", "java", "cpp", "c",
    "html", "css", "json", "xml", "bash", "sql", "php", "go", "rust",
)

_FORMATTER = HtmlFormatter(nowrap=True)


@lru_cache(maxsize=None)
def _lexer(name: str) -> Optional[Lexer]:
    try:
        return get_lexer_by_name(name, stripnl=False)
    except ClassNotFound:
        return None


def known_language(lang: str) -> bool:
    return bool(lang) and _lexer(lang.lower()) is not None


def detect_language(code: str) -> Optional[str]:
    """Best guess among DETECTABLE_LANGUAGES, or None when nothing scores."""
    best_name, best_score = None, 0.0
    for name in DETECTABLE_LANGUAGES:
        lexer = _lexer(name)
        if lexer is None:
            continue
        score = lexer.analyse_text(code)
        if score > best_score:
            best_name, best_score = name, score
    return best_name


def highlight_code(code: str, lang: str = "") -> Optional[str]:
    """Return highlighted HTML for code, or None if it should stay plain.

    An explicit language tag wins when Pygments knows it; otherwise the
    language is detected. Highlighter errors are logged and yield None so
    callers fall back to escaped text.
    """
    lang = (lang or "").strip().lower()
    name = lang if known_language(lang) else detect_language(code)
    if name is None:
        return None
    try:
        return highlight(code, _lexer(name), _FORMATTER)
    except Exception as e:
        logger.warning("Highlighting as %s failed: %s", name, e)
        return None
