"""Tests for configuration loading."""

from pathlib import Path

import pytest

from mdsession.config import Config, load_config
from mdsession.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr("mdsession.config.load_dotenv", lambda: False)
    for name in (
        "MDSESSION_DATA_DIR", "MDSESSION_DEBOUNCE_MS", "MDSESSION_MAX_HISTORY",
        "MDSESSION_CACHE_SIZE", "MDSESSION_MAX_SNAPSHOTS", "MDSESSION_DEFAULT_TITLE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.data_dir == Path.home() / ".mdsession"
        assert config.debounce_ms == 300
        assert config.max_history == 50
        assert config.render_cache_size == 20
        assert config.max_snapshots == 20

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MDSESSION_DATA_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("MDSESSION_MAX_HISTORY", "10")
        config = load_config()
        assert config.data_dir == tmp_path / "store"
        assert config.max_history == 10

    def test_cli_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MDSESSION_DATA_DIR", str(tmp_path / "env"))
        monkeypatch.setenv("MDSESSION_DEBOUNCE_MS", "900")
        config = load_config(data_dir=str(tmp_path / "cli"), debounce_ms=100)
        assert config.data_dir == tmp_path / "cli"
        assert config.debounce_ms == 100

    def test_non_integer_env_rejected(self, monkeypatch):
        monkeypatch.setenv("MDSESSION_CACHE_SIZE", "lots")
        with pytest.raises(ConfigError):
            load_config()


class TestValidate:
    @pytest.mark.parametrize("field,value", [
        ("debounce_ms", -1),
        ("max_history", 0),
        ("render_cache_size", 0),
        ("max_snapshots", 0),
        ("default_title", "   "),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            Config(**{field: value}).validate()
