"""Configuration loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError


@dataclass
class Config:
    """Application configuration."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".mdsession")
    debounce_ms: int = 300
    max_history: int = 50
    render_cache_size: int = 20
    max_snapshots: int = 20
    default_title: str = "Untitled"
    verbose: bool = False

    def validate(self) -> None:
        """Validate configuration values."""
        if self.debounce_ms < 0:
            raise ConfigError("debounce_ms cannot be negative.")
        if self.max_history < 1:
            raise ConfigError("max_history must be at least 1.")
        if self.render_cache_size < 1:
            raise ConfigError("render_cache_size must be at least 1.")
        if self.max_snapshots < 1:
            raise ConfigError("max_snapshots must be at least 1.")
        if not self.default_title.strip():
            raise ConfigError("default_title cannot be blank.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from e


def load_config(
    data_dir: Optional[str] = None,
    debounce_ms: Optional[int] = None,
    verbose: bool = False,
) -> Config:
    """Load config from .env and apply CLI overrides."""
    load_dotenv()

    config = Config(
        data_dir=Path(data_dir) if data_dir else Path(
            os.getenv("MDSESSION_DATA_DIR", str(Path.home() / ".mdsession"))
        ).expanduser(),
        debounce_ms=debounce_ms if debounce_ms is not None else _env_int(
            "MDSESSION_DEBOUNCE_MS", 300
        ),
        max_history=_env_int("MDSESSION_MAX_HISTORY", 50),
        render_cache_size=_env_int("MDSESSION_CACHE_SIZE", 20),
        max_snapshots=_env_int("MDSESSION_MAX_SNAPSHOTS", 20),
        default_title=os.getenv("MDSESSION_DEFAULT_TITLE", "Untitled"),
        verbose=verbose,
    )

    config.validate()
    return config
