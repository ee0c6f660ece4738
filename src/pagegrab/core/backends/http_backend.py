"""
HTTP Backend implementation using httpx.

Provides async HTTP fetching with:
- Configurable user agent and headers
- Automatic retry with exponential backoff
- Rate limit and block detection
"""

from __future__ import annotations

import time

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pagegrab.core.config.models import DEFAULT_USER_AGENT
from pagegrab.core.logging import get_logger

from .base import (
    Backend,
    BlockedError,
    FetchError,
    FetchResult,
    RateLimitError,
    RequestSpec,
    ServerError,
)

logger = get_logger("backends.http")


# Status codes that indicate blocking
BLOCKED_STATUS_CODES = {403, 406, 418, 451}

# Status codes that should trigger retry
RETRY_STATUS_CODES = {500, 502, 503, 504}


class HttpBackend(Backend):
    """HTTP backend using httpx for async requests.

    Features:
    - Persistent connection pooling
    - Automatic redirect following
    - Retry with exponential backoff
    - Rate limit detection
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        follow_redirects: bool = True,
        min_wait: float = 1.0,
        max_wait: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize HTTP backend.

        Args:
            timeout: Default request timeout in seconds
            max_retries: Maximum attempts (including the first one)
            user_agent: User-Agent header value
            default_headers: Default headers for all requests
            follow_redirects: Follow redirects unless a request says otherwise
            min_wait: Lower bound on backoff between attempts, in seconds
            max_wait: Upper bound on backoff between attempts, in seconds
            transport: Custom httpx transport (mostly for tests)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.follow_redirects = follow_redirects
        self.min_wait = min_wait
        self.max_wait = max_wait
        self._transport = transport

        self.default_headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            **(default_headers or {}),
        }

        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "http"

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=self.follow_redirects,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self._client

    def _check_status(self, response: httpx.Response) -> None:
        """Raise for responses that are retried or never worth retrying."""
        status = response.status_code
        url = str(response.url)

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            retry_seconds = None
            if retry_after:
                try:
                    retry_seconds = float(retry_after)
                except ValueError:
                    pass
            raise RateLimitError("Rate limit exceeded", url=url, retry_after=retry_seconds)

        if status in RETRY_STATUS_CODES:
            raise ServerError(f"Server error {status}", url=url, status_code=status)

        if status in BLOCKED_STATUS_CODES:
            raise BlockedError(
                f"Request blocked with status {status}",
                url=url,
                status_code=status,
            )

    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL with automatic retry.

        Args:
            request: Request specification

        Returns:
            FetchResult with response data. Non-2xx statuses that are not
            retried or blocked are returned as-is for the caller to judge.

        Raises:
            BlockedError: 403/406/418/451 responses
            RateLimitError: 429 persisted through every attempt
            FetchError: Transport failures and persistent 5xx responses
        """
        client = await self._ensure_client()
        headers = {**self.default_headers, **request.headers}
        timeout = request.timeout if request.timeout is not None else self.timeout

        retry_count = 0

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=1, min=self.min_wait, max=self.max_wait),
                retry=retry_if_exception_type((httpx.TransportError, RateLimitError, ServerError)),
                reraise=True,
            ):
                with attempt:
                    retry_count = attempt.retry_state.attempt_number - 1
                    if retry_count:
                        logger.debug(f"Retrying {request.url} (attempt {retry_count + 1})")

                    start = time.perf_counter()
                    response = await client.request(
                        request.method.upper(),
                        request.url,
                        headers=headers,
                        params=request.params or None,
                        timeout=timeout,
                        follow_redirects=request.follow_redirects and self.follow_redirects,
                    )
                    elapsed_ms = (time.perf_counter() - start) * 1000

                    self._check_status(response)

                    logger.debug(
                        f"Fetched {request.url} -> {response.status_code} in {elapsed_ms:.0f}ms",
                        extra={"url": request.url, "status_code": response.status_code, "elapsed_ms": elapsed_ms},
                    )

                    return FetchResult(
                        url=request.url,
                        final_url=str(response.url),
                        status_code=response.status_code,
                        html=response.text,
                        headers=dict(response.headers),
                        elapsed_ms=elapsed_ms,
                        retry_count=retry_count,
                    )

        except (BlockedError, RateLimitError):
            raise
        except ServerError as e:
            raise FetchError(
                f"Server kept failing after {retry_count + 1} attempts: {e}",
                url=request.url,
                status_code=e.status_code,
                cause=e,
            ) from e
        except httpx.TransportError as e:
            raise FetchError(
                f"Transport error after {retry_count + 1} attempts: {e}",
                url=request.url,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Fetch failed: {e}", url=request.url, cause=e) from e

        raise FetchError("Fetch produced no response", url=request.url)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
