"""Configuration loading and validation."""

from .models import (
    # Enums
    OutputFormat,
    TableStrategy,
    # Config models
    AppConfig,
    ExtractionConfig,
    FetchConfig,
    LoggingConfig,
    DEFAULT_USER_AGENT,
)
from .loader import ConfigError, load_app_config

__all__ = [
    # Enums
    "OutputFormat",
    "TableStrategy",
    # Config models
    "AppConfig",
    "ExtractionConfig",
    "FetchConfig",
    "LoggingConfig",
    "DEFAULT_USER_AGENT",
    # Loaders
    "ConfigError",
    "load_app_config",
]
