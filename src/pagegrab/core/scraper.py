"""
Page scraper.

Coordinates the whole workflow for one URL: fetch -> parse -> extract
the requested output format.
"""

from __future__ import annotations

from typing import Any, Union

from pagegrab.core.backends.base import Backend, FetchError, FetchResult, RequestSpec
from pagegrab.core.backends.http_backend import HttpBackend
from pagegrab.core.config.models import AppConfig, OutputFormat
from pagegrab.core.document import FetchedDocument
from pagegrab.core.extract.base import PageData
from pagegrab.core.extract.locators import TableExtractor
from pagegrab.core.extract.page import extract_images, extract_links, extract_text, extract_title
from pagegrab.core.logging import get_contextual_logger

# str for text/raw, list of records for links/images/tables, dict for all
ScrapeOutput = Union[str, list[dict[str, Any]], dict[str, Any]]


class PageScraper:
    """Fetches a page and extracts one output format from it."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        backend: Backend | None = None,
    ) -> None:
        """Initialize the scraper.

        Args:
            config: Application configuration (defaults when None)
            backend: Fetch backend (an HttpBackend built from config if None)
        """
        self.config = config or AppConfig()
        self._owns_backend = backend is None
        self.backend = backend or HttpBackend(
            timeout=self.config.fetch.timeout_seconds,
            max_retries=self.config.fetch.max_retries,
            user_agent=self.config.fetch.user_agent,
            default_headers=self.config.fetch.headers,
            follow_redirects=self.config.fetch.follow_redirects,
        )
        self.tables = TableExtractor(self.config.extraction.strategies)

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a URL, raising FetchError on a non-2xx response."""
        result = await self.backend.fetch(
            RequestSpec(url=url, follow_redirects=self.config.fetch.follow_redirects)
        )
        if not result.ok:
            raise FetchError(
                f"HTTP {result.status_code} for {url}",
                url=url,
                status_code=result.status_code,
            )
        return result

    def extract(
        self,
        document: FetchedDocument,
        fmt: OutputFormat | str,
        fetch_result: FetchResult | None = None,
    ) -> ScrapeOutput:
        """Extract one output format from an already fetched document."""
        fmt = OutputFormat(fmt)
        log = get_contextual_logger("scraper", url=document.url)

        if fmt is OutputFormat.RAW:
            return document.html
        if fmt is OutputFormat.TEXT:
            return extract_text(document)
        if fmt is OutputFormat.LINKS:
            return [link.to_dict() for link in extract_links(document)]
        if fmt is OutputFormat.IMAGES:
            return [image.to_dict() for image in extract_images(document)]
        if fmt is OutputFormat.TABLES:
            extraction = self.tables.run(document)
            log.info(
                f"Extracted {len(extraction.tables)} table(s) via {extraction.strategy or 'no strategy'}",
                extra={"strategy": extraction.strategy},
            )
            return [table.to_dict() for table in extraction.tables]

        return self.page_data(document, fetch_result).to_dict()

    def page_data(
        self,
        document: FetchedDocument,
        fetch_result: FetchResult | None = None,
    ) -> PageData:
        """Everything on the page plus response metadata."""
        data = PageData(
            url=fetch_result.url if fetch_result else (document.url or ""),
            title=extract_title(document),
            text=extract_text(document),
            links=extract_links(document),
            images=extract_images(document),
            tables=self.tables.extract(document),
        )
        if fetch_result is not None:
            data.final_url = fetch_result.final_url
            data.status_code = fetch_result.status_code
            data.content_length = fetch_result.content_length
            data.content_type = fetch_result.content_type
            data.last_modified = fetch_result.last_modified
        return data

    async def scrape(self, url: str, fmt: OutputFormat | str | None = None) -> ScrapeOutput:
        """Fetch a URL and extract the requested format.

        Args:
            url: Page to fetch
            fmt: Output format (default from config)

        Returns:
            str for text/raw, list of dicts for links/images/tables,
            dict for all

        Raises:
            BackendError: When the page cannot be fetched
        """
        fmt = OutputFormat(fmt or self.config.default_format)
        log = get_contextual_logger("scraper", url=url)

        result = await self.fetch(url)
        log.info(f"HTTP {result.status_code}, {result.content_length} bytes in {result.elapsed_ms:.0f}ms")

        document = FetchedDocument.from_fetch_result(result, self.config.extraction)
        return self.extract(document, fmt, fetch_result=result)

    async def close(self) -> None:
        if self._owns_backend:
            await self.backend.close()

    async def __aenter__(self) -> "PageScraper":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


async def scrape_url(
    url: str,
    fmt: OutputFormat | str = OutputFormat.ALL,
    config: AppConfig | None = None,
) -> ScrapeOutput:
    """One-shot helper: fetch a URL and extract one format."""
    async with PageScraper(config) as scraper:
        return await scraper.scrape(url, fmt)
