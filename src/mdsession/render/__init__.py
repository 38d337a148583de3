"""Markdown rendering: converter chain plus a bounded result cache."""

import hashlib
import logging
from collections import OrderedDict
from typing import Iterable, Optional

from ..exceptions import ConvertError
from ..utils import escape_html
from .base import Converter
from .markdown import MarkdownItConverter
from .simple import SimpleConverter

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = '<p class="empty-placeholder">Start writing...</p>'


def get_converters() -> list[Converter]:
    """Return the default converter chain, most capable first."""
    return [MarkdownItConverter(), SimpleConverter()]


def cache_key(text: str) -> str:
    digest = hashlib.sha1(text.encode("utf-8", errors="replace")).hexdigest()
    return f"{len(text)}:{digest}"


class RenderCache:
    """Insertion-ordered map with FIFO eviction."""

    def __init__(self, max_size: int = 20):
        self.max_size = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        if key not in self._entries:
            while len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class HtmlRenderer:
    """Renders markdown through a fallback chain and memoizes results.

    ``render`` never raises: if every converter fails the raw text is
    escaped and wrapped in a single paragraph.
    """

    def __init__(
        self,
        converters: Optional[Iterable[Converter]] = None,
        cache_size: int = 20,
    ):
        self.converters = list(converters) if converters is not None else get_converters()
        self.cache = RenderCache(cache_size)

    def render(self, text) -> str:
        text = "" if text is None else str(text)
        if not text.strip():
            return EMPTY_PLACEHOLDER

        try:
            key = cache_key(text)
            cached = self.cache.get(key)
            if cached is not None:
                return cached
            result = self._convert(text)
            self.cache.put(key, result)
            return result
        except Exception as e:
            logger.error("Markdown conversion failed, showing escaped text: %s", e)
            return f"<p>{escape_html(text)}</p>"

    def _convert(self, text: str) -> str:
        for converter in self.converters:
            try:
                result = converter.convert(text)
            except Exception as e:
                logger.warning("%s converter failed: %s", converter.name, e)
                continue
            if isinstance(result, str):
                return result
            logger.warning(
                "%s converter returned %s instead of str",
                converter.name, type(result).__name__,
            )
        raise ConvertError("No converter could render the document")

    def clear(self) -> None:
        self.cache.clear()
