import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ingest_jsonapi.core.logging import get_logger


__all__ = [
    "ConfigurationError",
    "HTTPSettings",
    "LoggingSettings",
    "Settings",
    "DEFAULT_CONFIG_FILENAME",
]

DEFAULT_CONFIG_FILENAME = "ingest-jsonapi.toml"
CONFIG_FILE_ENV = "INGEST_JSONAPI_CONFIG_FILE"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class HTTPSettings(BaseModel):
    """HTTP client configuration settings.

    Every outbound request uses explicit connect and read timeouts.
    """

    timeout_connect: float = Field(
        default=5.0,
        description="Connection timeout in seconds",
        gt=0,
    )

    timeout_read: float = Field(
        default=30.0,
        description="Read timeout in seconds",
        gt=0,
    )

    follow_redirects: bool = Field(
        default=False,
        description="Follow HTTP redirects; a redirect is otherwise reported as an unexpected status",
    )

    user_agent: str | None = Field(
        default=None,
        description="Optional User-Agent header sent with every request",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    format: str = Field(
        default="auto",
        description="Logging output format: 'console', 'json' or 'auto' (json when stderr is not a TTY)",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        upper_v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate and normalize log format."""
        lower_v = v.lower()
        valid_formats = ["auto", "console", "json"]
        if lower_v not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return lower_v


class Settings(BaseSettings):
    """
    Process-wide settings for the json_api ingest processor.

    Settings are loaded from environment variables (prefix ``INGEST_JSONAPI_``,
    nested keys separated by ``__``), a .env file and an optional TOML file.
    Environment variables take precedence over TOML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="INGEST_JSONAPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    cache_size: int = Field(
        default=1000,
        ge=0,
        description="Maximum number of responses kept in the shared response cache (0 disables caching)",
    )

    http: HTTPSettings = Field(
        default_factory=HTTPSettings,
        description="HTTP client configuration settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls,
        config_path: Path | str | None = None,
        **kwargs: Any,
    ) -> "Settings":
        """Create Settings from a TOML file, the environment and overrides.

        The file is looked up in this order: ``config_path``, the
        ``INGEST_JSONAPI_CONFIG_FILE`` environment variable, then
        ``ingest-jsonapi.toml`` in the current directory. Keyword overrides
        win over both.
        """
        if config_path is None:
            config_path_env = os.environ.get(CONFIG_FILE_ENV)
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
            if candidate.exists():
                config_path = candidate

        config_data: dict[str, Any] = {}
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            config_data = cls.load_toml_config(config_path)
            get_logger(__name__).info("config_file_loaded", path=str(config_path))

        merged = _strip_env_overridden(config_data)
        _deep_update(merged, kwargs)

        try:
            return cls(**merged)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def _strip_env_overridden(config_data: dict[str, Any]) -> dict[str, Any]:
    """Drop TOML values that the environment already sets.

    Init arguments outrank environment variables in pydantic-settings, so
    file values shadowed by the environment must not be passed in.
    """
    prefix = Settings.model_config.get("env_prefix", "")
    env_keys = {key.upper() for key in os.environ}

    result: dict[str, Any] = {}
    for key, value in config_data.items():
        env_key = f"{prefix}{key}".upper()
        if isinstance(value, dict):
            nested = {
                nested_key: nested_value
                for nested_key, nested_value in value.items()
                if f"{env_key}__{nested_key}".upper() not in env_keys
            }
            if env_key not in env_keys:
                result[key] = nested
        elif env_key not in env_keys:
            result[key] = value
    return result


def _deep_update(target: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
