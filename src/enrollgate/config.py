"""Configuration loading for Enrollgate."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "enrollgate.yaml"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class DatabaseConfig:
    """Database settings.

    `path` is a SQLite file path, or ":memory:" for an in-memory database.
    `busy_timeout` is how long (seconds) a writer waits for the database lock
    held by a concurrent enrollment before giving up.
    """

    path: str = "enrollgate.db"
    busy_timeout: float = 30.0


@dataclass
class LoggingConfig:
    """Logging settings passed to setup_logging()."""

    dir: str = "logs"
    level: str = "INFO"
    console: bool = True


@dataclass
class EngineConfig:
    """Enrollgate configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a section or value has the wrong type.
        """
        database_data = data.get("database", {}) or {}
        logging_data = data.get("logging", {}) or {}
        if not isinstance(database_data, dict) or not isinstance(logging_data, dict):
            raise ConfigError("'database' and 'logging' must be mappings")

        try:
            database = DatabaseConfig(
                path=str(database_data.get("path", "enrollgate.db")),
                busy_timeout=float(database_data.get("busy_timeout", 30.0)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid database settings: {e}") from e

        logging_config = LoggingConfig(
            dir=str(logging_data.get("dir", "logs")),
            level=str(logging_data.get("level", "INFO")).upper(),
            console=bool(logging_data.get("console", True)),
        )

        if database.busy_timeout < 0:
            raise ConfigError("database.busy_timeout must not be negative")

        return cls(database=database, logging=logging_config)

    def apply_env(self) -> EngineConfig:
        """Apply ENROLLGATE_* environment overrides in place.

        Returns:
            The same config object, for chaining.
        """
        if db_path := os.environ.get("ENROLLGATE_DB_PATH"):
            self.database.path = db_path
        if log_dir := os.environ.get("ENROLLGATE_LOG_DIR"):
            self.logging.dir = log_dir
        if log_level := os.environ.get("ENROLLGATE_LOG_LEVEL"):
            self.logging.level = log_level.upper()
        return self


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from a YAML file, then apply environment overrides.

    Args:
        path: Path to the config file. When None, 'enrollgate.yaml' in the
              current directory is used if it exists, otherwise defaults.

    Returns:
        Loaded configuration.

    Raises:
        ConfigError: If an explicit path is missing or the file is invalid.
    """
    if path is None:
        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not default_path.exists():
            return EngineConfig().apply_env()
        path = default_path

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return EngineConfig.from_dict(data).apply_env()
