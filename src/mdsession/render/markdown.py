"""Full-featured converter built on markdown-it-py."""

from markdown_it import MarkdownIt

from .base import Converter
from .highlight import highlight_code


class MarkdownItConverter(Converter):
    """Converts markdown to HTML with Pygments-highlighted code fences."""

    def __init__(self) -> None:
        self._md = MarkdownIt(
            "commonmark",
            {"html": True, "breaks": True, "highlight": self._highlight},
        ).enable("table").enable("strikethrough")

    @property
    def name(self) -> str:
        return "markdown-it"

    @staticmethod
    def _highlight(code: str, lang: str, attrs: str) -> str:
        # An empty string tells markdown-it to escape the code itself.
        return highlight_code(code, lang) or ""

    def convert(self, text: str) -> str:
        return self._md.render(text)
