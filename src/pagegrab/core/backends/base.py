"""
Backend base classes and data structures.

Defines the interface contract for fetching backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RequestSpec:
    """Specification for an HTTP request."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    follow_redirects: bool = True


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    url: str
    final_url: str  # After redirects
    status_code: int
    html: str
    headers: dict[str, str]

    # Timing
    elapsed_ms: float
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    retry_count: int = 0

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        """Case-insensitive response header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def content_length(self) -> int:
        """Content length in bytes, from the header when the server sent one."""
        declared = self.header("content-length")
        if declared and declared.strip().isdigit():
            return int(declared)
        return len(self.html.encode("utf-8"))

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def last_modified(self) -> str | None:
        return self.header("last-modified")


class Backend(ABC):
    """Abstract base class for fetching backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""
        pass

    @abstractmethod
    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL and return the response.

        Args:
            request: Request specification

        Returns:
            FetchResult with response data

        Raises:
            BackendError: On unrecoverable fetch failure
        """
        pass

    async def close(self) -> None:
        """Clean up backend resources."""
        pass

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class BackendError(Exception):
    """Base exception for backend errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class FetchError(BackendError):
    """Error during fetch operation, including non-2xx responses."""
    pass


class RateLimitError(BackendError):
    """Rate limit hit (429 or similar)."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, url, status_code=429)
        self.retry_after = retry_after


class ServerError(BackendError):
    """Transient 5xx response, retried before being surfaced."""
    pass


class BlockedError(BackendError):
    """Request refused by the server (403, 451 and friends)."""
    pass
