"""Abstract base class for markdown converters."""

from abc import ABC, abstractmethod


class Converter(ABC):
    """Abstract markdown to HTML converter."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in log messages."""

    @abstractmethod
    def convert(self, text: str) -> str:
        """Render markdown text to an HTML fragment.

        Args:
            text: Non-blank markdown source.

        Returns the HTML string. May raise; the renderer falls through to
        the next converter in its chain.
        """
