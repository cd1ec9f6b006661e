"""
Configuration loading.

Settings come from an optional YAML file, then an optional .env file, then
the process environment (highest precedence).

Expected YAML format:
```yaml
database:
  host: localhost
  port: 5432
  name: campuscoffee
  user: campuscoffee
  password: secret
logging:
  level: INFO
  format: json
metrics:
  port: 8000
```
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from campuscoffee.core.exceptions import CampusCoffeeError

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "DB_HOST": ("database", "host"),
    "DB_PORT": ("database", "port"),
    "DB_NAME": ("database", "name"),
    "DB_USER": ("database", "user"),
    "DB_PASSWORD": ("database", "password"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "METRICS_PORT": ("metrics", "port"),
}


class ConfigError(CampusCoffeeError):
    """Raised for invalid or unreadable configuration."""

    error_code = "CONFIG_ERROR"


class DatabaseSettings(BaseModel):
    host: str = "localhost"
    port: int = Field(default=5432, gt=0, lt=65536)
    name: str = "campuscoffee"
    user: str = "campuscoffee"
    password: str | None = None
    min_pool_size: int = Field(default=1, ge=1)
    max_pool_size: int = Field(default=10, ge=1)
    timeout: float = Field(default=30.0, gt=0)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "json"


class MetricsSettings(BaseModel):
    port: int = Field(default=8000, gt=0, lt=65536)


class Settings(BaseModel):
    """
    Application settings.

    Attributes:
        database: PostgreSQL connection settings
        logging: Log level and output format
        metrics: Prometheus endpoint settings
    """

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return config


def load_settings(
    config_path: str | Path | None = None,
    env_file: str | Path | None = None,
) -> Settings:
    """
    Load application settings.

    Args:
        config_path: Optional YAML configuration file
        env_file: Optional .env file loaded into the environment first

    Returns:
        Validated Settings

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        ConfigError: If the file is malformed or a value is invalid
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    raw: dict[str, Any] = _read_yaml(Path(config_path)) if config_path else {}

    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            section_values = raw.setdefault(section, {})
            if not isinstance(section_values, dict):
                raise ConfigError(f"Configuration section '{section}' must be a mapping")
            if key == "level":
                value = value.upper()
            elif key == "format":
                value = value.lower()
            section_values[key] = value

    try:
        return Settings.model_validate(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
