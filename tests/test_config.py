"""Tests for configuration loading.

**Feature: rate-alerts**
"""

import tempfile
from pathlib import Path

import pytest

from ratewatch.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    get_config_path,
    load_config,
    write_template_config,
)
from ratewatch.errors import ConfigError


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, temp_dir: Path):
        config = load_config(temp_dir / "absent.toml")

        assert config.checker.interval_seconds == 3600
        assert config.checker.max_attempts == 3
        assert config.checker.retry_delay_seconds == 1.0
        assert config.rates.source == "store"
        assert config.notifications.channels == ["console", "in_app"]

    def test_reads_values(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text(
            '[database]\npath = "/tmp/rw.db"\n'
            "[checker]\ninterval_seconds = 60\nowner = \"alice\"\n"
            '[rates]\nsource = "file"\nfile = "/tmp/rates.json"\n'
            '[notifications]\nchannels = ["in_app"]\n'
        )

        config = load_config(path)

        assert config.database.path == Path("/tmp/rw.db")
        assert config.checker.interval_seconds == 60
        assert config.checker.owner == "alice"
        assert config.rates.file == Path("/tmp/rates.json")
        assert config.notifications.channels == ["in_app"]

    def test_owner_channel_overrides(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text(
            '[notifications]\nchannels = ["console", "in_app"]\n'
            '[notifications.owners.alice]\nchannels = ["in_app"]\n'
            "[notifications.owners.bob]\nchannels = []\n"
        )

        config = load_config(path)

        owners = config.notifications.owners
        assert owners["alice"].channels == ["in_app"]
        assert owners["bob"].channels == []
        assert config.notifications.channels == ["console", "in_app"]

    def test_unparsable_file(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text("[checker\ninterval_seconds = ")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_values(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text("[checker]\ninterval_seconds = -5\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_file_source_requires_path(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text('[rates]\nsource = "file"\n')

        with pytest.raises(ConfigError):
            load_config(path)


class TestConfigPath:

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert get_config_path() == DEFAULT_CONFIG_PATH

    def test_env_override(self, monkeypatch, temp_dir: Path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "custom.toml"))
        assert get_config_path() == temp_dir / "custom.toml"


class TestTemplateConfig:

    def test_template_loads(self, temp_dir: Path):
        path = write_template_config(temp_dir / "nested" / "config.toml")

        config = load_config(path)
        assert config.checker.max_attempts == 3
        assert config.rates.source == "store"
