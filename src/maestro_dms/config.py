"""
Configuration management for maestro_dms library.

This module handles environment variables, DMS credentials, logging options
and default settings for the document-management client.
"""

import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from loguru import logger

from .exceptions import ConfigurationError


DEFAULT_HOST = "https://dms.meetmaestro.com"


class DMSConfig(BaseSettings):
    """Configuration settings for the DMS client."""

    model_config = SettingsConfigDict(
        env_prefix="DMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # DMS Configuration
    host: str = Field(default=DEFAULT_HOST)
    api_key: Optional[str] = Field(default=None)
    api_secret: Optional[str] = Field(default=None)
    customer: Optional[str] = Field(default=None)

    # Transport Configuration
    timeout_seconds: float = Field(default=30.0)

    # Logging Configuration
    logging: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )

    @field_validator("host")
    @classmethod
    def validate_host(cls, v):
        """Validate DMS host format."""
        if not v:
            raise ValueError("DMS host must not be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("DMS host must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    def get_credentials(self) -> Union["BearerCredentials", "ApiKeyCredentials"]:
        """
        Resolve the credential variant described by this configuration.

        Returns:
            BearerCredentials when only an api key is set, ApiKeyCredentials
            when the api key, secret and customer are all set.

        Raises:
            ConfigurationError: If no api key is set or the triplet is incomplete
        """
        if not self.api_key:
            raise ConfigurationError("An API key is required", config_key="api_key")

        if self.api_secret and self.customer:
            return ApiKeyCredentials(self.api_key, self.api_secret, self.customer)

        if self.api_secret or self.customer:
            missing = "customer" if self.api_secret else "api_secret"
            raise ConfigurationError(
                "api_secret and customer must be configured together",
                config_key=missing,
            )

        return BearerCredentials(self.api_key)

    def with_updates(self, **changes: Any) -> "DMSConfig":
        """Return a re-validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        try:
            return DMSConfig(**data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration update: {str(e)}")


@dataclass(frozen=True)
class BearerCredentials:
    """A single bearer token."""
    token: str

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(frozen=True)
class ApiKeyCredentials:
    """The api-key / secret / customer header triplet."""
    api_key: str
    api_secret: str
    customer: str

    def headers(self) -> Dict[str, str]:
        return {
            "media-api-key": self.api_key,
            "media-api-secret": self.api_secret,
            "media-api-customer": self.customer,
        }


# Logging options

LogRecord = Dict[str, Any]
LogSink = Callable[[LogRecord], None]


@dataclass(frozen=True)
class NoLogging:
    """Request records are not emitted."""

    def emit(self, record: LogRecord) -> None:
        return None


@dataclass(frozen=True)
class DefaultLogging:
    """Request records go to the loguru logger."""

    def emit(self, record: LogRecord) -> None:
        logger.bind(**record).info(
            f"DMS response {record['status_code']} in {record['duration_ms']:.1f}ms"
        )


@dataclass(frozen=True)
class CustomSink:
    """Request records are handed to a caller-supplied function."""
    sink: LogSink

    def emit(self, record: LogRecord) -> None:
        self.sink(record)


LoggingOption = Union[NoLogging, DefaultLogging, CustomSink]


def resolve_logging(value: Union[None, bool, LogSink, LoggingOption]) -> LoggingOption:
    """
    Turn the loose ``logging`` constructor argument into a LoggingOption.

    Args:
        value: None/False, True, a callable sink, or a LoggingOption

    Returns:
        LoggingOption instance
    """
    if isinstance(value, (NoLogging, DefaultLogging, CustomSink)):
        return value
    if value is None or value is False:
        return NoLogging()
    if value is True:
        return DefaultLogging()
    if callable(value):
        return CustomSink(value)
    raise ConfigurationError(
        f"Unsupported logging option: {value!r}", config_key="logging"
    )


def load_config(config_file: Optional[str] = None, **overrides: Any) -> DMSConfig:
    """
    Load configuration from environment variables and optional config file.

    Args:
        config_file: Optional path to .env file
        **overrides: Explicit values that win over the environment

    Returns:
        DMSConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if config_file:
        if not Path(config_file).exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        load_dotenv(config_file)
    elif Path(".env").exists():
        load_dotenv(".env")

    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        config = DMSConfig(**overrides)
        logger.debug(f"Configuration loaded for host: {config.host}")
        return config
    except ValueError as e:
        raise ConfigurationError(f"Failed to load configuration: {str(e)}")


def setup_logging(config: DMSConfig) -> None:
    """
    Setup logging configuration based on config settings.

    Args:
        config: DMSConfig instance
    """
    logger.remove()

    logger.add(
        sink=lambda message: sys.stderr.write(message),
        format=config.log_format,
        level=config.log_level,
        colorize=True,
    )


# Global configuration instance
_config: Optional[DMSConfig] = None


def get_config() -> DMSConfig:
    """
    Get the global configuration instance.

    Returns:
        DMSConfig: Global configuration instance
    """
    global _config
    if _config is None:
        _config = load_config()
        setup_logging(_config)
    return _config


def set_config(config: DMSConfig) -> None:
    """
    Set the global configuration instance.

    Args:
        config: DMSConfig instance to set as global
    """
    global _config
    _config = config
    setup_logging(config)
