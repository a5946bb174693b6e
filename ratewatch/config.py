"""Configuration loading for RateWatch.

Settings live in a TOML file at ``~/.config/ratewatch/config.toml``
(or the path in ``RATEWATCH_CONFIG``). Every key is optional.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import toml
from pydantic import BaseModel, Field, ValidationError

from ratewatch.errors import ConfigError

CONFIG_DIR = Path.home() / ".config" / "ratewatch"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "ratewatch.db"
CONFIG_ENV_VAR = "RATEWATCH_CONFIG"


class DatabaseConfig(BaseModel):
    path: Path = DEFAULT_DB_PATH


class CheckerConfig(BaseModel):
    interval_seconds: float = Field(default=3600.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    owner: Optional[str] = None


class RatesConfig(BaseModel):
    source: Literal["store", "file"] = "store"
    file: Optional[Path] = None


class OwnerNotificationsConfig(BaseModel):
    channels: list[str]


class NotificationsConfig(BaseModel):
    channels: list[str] = Field(default_factory=lambda: ["console", "in_app"])
    # Per-owner channel lists, from [notifications.owners.<owner>] tables.
    owners: dict[str, OwnerNotificationsConfig] = Field(default_factory=dict)


class Config(BaseModel):
    """Top-level RateWatch configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    checker: CheckerConfig = Field(default_factory=CheckerConfig)
    rates: RatesConfig = Field(default_factory=RatesConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)


def get_config_path() -> Path:
    """Resolve the config file path, honouring ``RATEWATCH_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from TOML.

    Args:
        path: Config file path. Defaults to ``get_config_path()``.

    Returns:
        Parsed config; defaults when the file does not exist.

    Raises:
        ConfigError: If the file cannot be parsed or fails validation.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return Config()

    try:
        data = toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}:\n{e}") from e

    if config.rates.source == "file" and config.rates.file is None:
        raise ConfigError("rates.source is 'file' but rates.file is not set")
    return config


def write_template_config(path: Optional[Path] = None) -> Path:
    """Write a template config file and return its path."""
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "database": {
            "path": str(DEFAULT_DB_PATH),
        },
        "checker": {
            "interval_seconds": 3600,
            "max_attempts": 3,
            "retry_delay_seconds": 1.0,
        },
        "rates": {
            "source": "store",  # store or file
        },
        "notifications": {
            "channels": ["console", "in_app"],
        },
    }

    with open(config_path, "w") as f:
        toml.dump(template, f)

    return config_path
