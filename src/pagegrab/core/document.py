"""
Fetched document wrapper.

A page always carries its raw markup. When the body looks like HTML and
parses, it also carries a BeautifulSoup DOM tree and an lxml tree that
answers XPath queries. Table extraction probes these capabilities and
falls back to plain-text scanning when they are missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from bs4 import BeautifulSoup, FeatureNotFound
from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from pagegrab.core.config.models import ExtractionConfig
from pagegrab.core.logging import get_logger

if TYPE_CHECKING:
    from pagegrab.core.backends.base import FetchResult

logger = get_logger("document")

# Content types we attempt to parse into trees
MARKUP_CONTENT_TYPES = ("html", "xml")


class QueryNode(Protocol):
    """Node returned by a node query, able to serialize itself."""

    @property
    def outer_html(self) -> str: ...


class NodeQuery(Protocol):
    """XPath-style query interface over a parsed document."""

    def xpath(self, expression: str) -> list[QueryNode]: ...


@dataclass(frozen=True)
class LxmlNode:
    """lxml element exposed as a QueryNode."""

    element: HtmlElement

    @property
    def outer_html(self) -> str:
        return lxml_html.tostring(self.element, encoding="unicode", with_tail=False)


class LxmlNodeQuery:
    """NodeQuery backed by an lxml HTML tree."""

    def __init__(self, root: HtmlElement):
        self.root = root

    def xpath(self, expression: str) -> list[LxmlNode]:
        return [LxmlNode(node) for node in self.root.xpath(expression) if isinstance(node, HtmlElement)]


def is_markup_content_type(content_type: str | None) -> bool:
    """Whether a Content-Type header describes HTML or XML.

    A missing header is treated as HTML.
    """
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return any(kind in media_type for kind in MARKUP_CONTENT_TYPES)


def _parse_dom(html: str, parser: str) -> BeautifulSoup | None:
    try:
        return BeautifulSoup(html, parser)
    except FeatureNotFound:
        logger.warning(f"BeautifulSoup tree builder '{parser}' is not installed, DOM disabled")
    except Exception as e:
        logger.debug(f"DOM parse failed: {e}")
    return None


def _parse_lxml(html: str) -> HtmlElement | None:
    try:
        return lxml_html.document_fromstring(html)
    except ValueError:
        # Unicode input with an XML encoding declaration
        try:
            return lxml_html.document_fromstring(html.encode("utf-8"))
        except (etree.ParserError, ValueError) as e:
            logger.debug(f"lxml parse failed: {e}")
    except etree.ParserError as e:
        logger.debug(f"lxml parse failed: {e}")
    return None


@dataclass
class FetchedDocument:
    """A page body plus whichever parsed views could be built for it."""

    html: str
    url: str | None = None
    dom: BeautifulSoup | None = None
    node_query: LxmlNodeQuery | None = None

    @property
    def tree(self) -> HtmlElement | None:
        """lxml root element, when available."""
        return self.node_query.root if self.node_query is not None else None

    @classmethod
    def from_markup(
        cls,
        html: str,
        url: str | None = None,
        *,
        content_type: str | None = None,
        config: ExtractionConfig | None = None,
    ) -> "FetchedDocument":
        """Build a document, parsing trees when the body is markup.

        Args:
            html: Raw response body
            url: Final URL of the page (base for relative links)
            content_type: Content-Type header, used to skip parsing non-HTML
            config: Extraction settings (parser choice, enabled views)

        Returns:
            FetchedDocument; parse failures leave the matching view as None
        """
        config = config or ExtractionConfig()
        document = cls(html=html, url=url)

        if not html.strip() or not is_markup_content_type(content_type):
            logger.debug(f"Not parsing body (content type {content_type!r})")
            return document

        if config.enable_dom:
            document.dom = _parse_dom(html, config.dom_parser)

        if config.enable_node_query:
            root = _parse_lxml(html)
            if root is not None:
                document.node_query = LxmlNodeQuery(root)

        return document

    @classmethod
    def from_fetch_result(
        cls,
        result: FetchResult,
        config: ExtractionConfig | None = None,
    ) -> "FetchedDocument":
        return cls.from_markup(
            result.html,
            url=result.final_url,
            content_type=result.content_type,
            config=config,
        )
