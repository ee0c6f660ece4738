"""
Pydantic configuration models for pagegrab.

These models provide type-safe configuration with validation for:
- HTTP fetch settings
- Table extraction strategy selection
- Logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class OutputFormat(str, Enum):
    """What to return from a scraped page."""

    TEXT = "text"
    LINKS = "links"
    IMAGES = "images"
    TABLES = "tables"
    RAW = "raw"
    ALL = "all"


class TableStrategy(str, Enum):
    """Table location strategies, highest fidelity first."""

    DOM = "dom"
    NODE_QUERY = "node_query"
    REGEX = "regex"


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


# =============================================================================
# Fetch Configuration
# =============================================================================


class FetchConfig(BaseModel):
    """HTTP request settings."""

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent header sent with every request",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for transient failures",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers merged over the defaults",
    )


# =============================================================================
# Extraction Configuration
# =============================================================================


class ExtractionConfig(BaseModel):
    """Table extraction settings."""

    strategies: list[TableStrategy] = Field(
        default_factory=lambda: [
            TableStrategy.DOM,
            TableStrategy.NODE_QUERY,
            TableStrategy.REGEX,
        ],
        min_length=1,
        description="Table strategies to try, in order",
    )
    dom_parser: str = Field(
        default="lxml",
        description="BeautifulSoup tree builder for the DOM strategy",
    )
    enable_dom: bool = Field(
        default=True,
        description="Build a DOM tree for fetched HTML",
    )
    enable_node_query: bool = Field(
        default=True,
        description="Build an XPath-queryable tree for fetched HTML",
    )

    @field_validator("strategies")
    @classmethod
    def unique_strategies(cls, v: list[TableStrategy]) -> list[TableStrategy]:
        """Drop repeated strategies, keeping first position."""
        seen: list[TableStrategy] = []
        for strategy in v:
            if strategy not in seen:
                seen.append(strategy)
        return seen


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from pagegrab.yaml.
    """

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    default_format: OutputFormat = Field(
        default=OutputFormat.ALL,
        description="Output format when none is given",
    )
