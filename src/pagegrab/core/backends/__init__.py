"""Backend implementations for fetching pages."""

from .base import (
    Backend,
    BackendError,
    BlockedError,
    FetchError,
    FetchResult,
    RateLimitError,
    RequestSpec,
    ServerError,
)
from .http_backend import HttpBackend

__all__ = [
    # Base classes
    "Backend",
    "RequestSpec",
    "FetchResult",
    # Errors
    "BackendError",
    "FetchError",
    "RateLimitError",
    "ServerError",
    "BlockedError",
    # HTTP backend
    "HttpBackend",
]
