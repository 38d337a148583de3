"""Custom exceptions for mdsession."""


class MdSessionError(Exception):
    """Base exception for mdsession."""


class ConfigError(MdSessionError):
    """Raised when configuration is missing or invalid."""


class LoadError(MdSessionError):
    """Raised when persisted state is unreadable or corrupt."""


class SaveError(MdSessionError):
    """Raised when a persistence write is rejected."""


class ConvertError(MdSessionError):
    """Raised by a converter that cannot render its input."""


class ExportError(MdSessionError):
    """Raised when an export format is unsupported or fails."""


class NotFoundError(MdSessionError):
    """Raised when a document, snapshot or tag no longer exists."""
