"""Tests for core/scraper.py: format dispatch over a fetched page."""

from __future__ import annotations

import logging

import httpx
import pytest

from pagegrab.core.backends import FetchError, HttpBackend
from pagegrab.core.config.models import AppConfig, ExtractionConfig, OutputFormat
from pagegrab.core.document import FetchedDocument
from pagegrab.core.scraper import PageScraper

URL = "https://example.com/dir/page.html"


@pytest.fixture
def page_backend(mock_transport, three_table_page):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing":
            return httpx.Response(404, html="gone")
        return httpx.Response(
            200,
            html=three_table_page,
            headers={"Last-Modified": "Wed, 21 Oct 2015 07:28:00 GMT"},
        )

    return HttpBackend(transport=mock_transport(handler), min_wait=0, max_wait=0)


class TestScrape:
    @pytest.mark.asyncio
    async def test_tables(self, page_backend, caplog):
        scraper = PageScraper(backend=page_backend)
        with caplog.at_level(logging.INFO, logger="pagegrab"):
            tables = await scraper.scrape(URL, OutputFormat.TABLES)
        await page_backend.close()

        assert [t["index"] for t in tables] == [0, 1, 2]
        assert tables[0]["rows"] == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]
        assert tables[0]["rowCount"] == 2
        assert "Extracted 3 table(s) via dom" in caplog.text

    @pytest.mark.asyncio
    async def test_all_includes_metadata(self, page_backend, three_table_page):
        scraper = PageScraper(backend=page_backend)
        data = await scraper.scrape(URL, "all")
        await page_backend.close()

        assert data["url"] == URL
        assert data["status_code"] == 200
        assert data["content_type"].startswith("text/html")
        assert data["content_length"] == len(three_table_page.encode("utf-8"))
        assert data["last_modified"] == "Wed, 21 Oct 2015 07:28:00 GMT"
        assert data["title"] == "Three tables"
        assert "Between tables" in data["text"]
        assert len(data["tables"]) == 3

    @pytest.mark.asyncio
    async def test_default_format_from_config(self, page_backend):
        scraper = PageScraper(AppConfig(default_format=OutputFormat.RAW), backend=page_backend)
        raw = await scraper.scrape(URL)
        await page_backend.close()

        assert raw.startswith("<!DOCTYPE html>")

    @pytest.mark.asyncio
    async def test_configured_strategies_used(self, page_backend, caplog):
        config = AppConfig(extraction=ExtractionConfig(strategies=["regex"]))
        scraper = PageScraper(config, backend=page_backend)
        with caplog.at_level(logging.INFO, logger="pagegrab"):
            tables = await scraper.scrape(URL, OutputFormat.TABLES)
        await page_backend.close()

        assert len(tables) == 3
        assert "via regex" in caplog.text

    @pytest.mark.asyncio
    async def test_http_error_raises(self, page_backend):
        scraper = PageScraper(backend=page_backend)
        with pytest.raises(FetchError) as exc_info:
            await scraper.scrape("https://example.com/missing", OutputFormat.TEXT)
        await page_backend.close()

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_owned_backend_closed(self):
        async with PageScraper() as scraper:
            assert isinstance(scraper.backend, HttpBackend)
        assert scraper.backend._client is None


class TestExtract:
    def test_formats(self, article_page):
        scraper = PageScraper()
        document = FetchedDocument.from_markup(article_page, url=URL)

        assert scraper.extract(document, "raw") == article_page
        assert "Hello world" in scraper.extract(document, OutputFormat.TEXT)
        assert scraper.extract(document, "links")[0] == {
            "href": "https://example.com/about",
            "text": "About us",
        }
        assert scraper.extract(document, "images")[0]["src"] == "https://example.com/img/logo.png"
        assert scraper.extract(document, "tables") == []

    def test_all_without_fetch_result(self, article_page):
        data = PageScraper().extract(FetchedDocument.from_markup(article_page, url=URL), "all")
        assert data["url"] == URL
        assert data["status_code"] is None
        assert data["title"] == "Example & Co"
        assert data["tables"] == []

    def test_unknown_format(self, article_page):
        with pytest.raises(ValueError):
            PageScraper().extract(FetchedDocument(html=article_page), "pdf")
