"""
Table location strategies and the selector that chains them.

Locators are tried in priority order (DOM tree, XPath node query, regex
over the raw text). The first one that finds at least one table is used
on its own; its tables are never mixed with another locator's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable

from pagegrab.core.config.models import TableStrategy
from pagegrab.core.document import FetchedDocument
from pagegrab.core.logging import get_logger

from .base import TableRecord
from .cells import CellSource, DomCellSource, MarkupCellSource, table_spans
from .normalize import build_table_record

logger = get_logger("extract.tables")

class TableLocator(ABC):
    """Finds table occurrences in a document."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Locator identifier."""
        pass

    def available(self, document: FetchedDocument) -> bool:
        """Whether the document offers what this locator needs."""
        return True

    @abstractmethod
    def locate(self, document: FetchedDocument, raw_markup: str) -> list[CellSource]:
        """Return one cell source per table, in document order."""
        pass


class DomLocator(TableLocator):
    """Walks the parsed DOM for <table> elements."""

    @property
    def name(self) -> str:
        return TableStrategy.DOM.value

    def available(self, document: FetchedDocument) -> bool:
        return document.dom is not None

    def locate(self, document: FetchedDocument, raw_markup: str) -> list[CellSource]:
        return [DomCellSource(table) for table in document.dom.find_all("table")]


class NodeQueryLocator(TableLocator):
    """Queries //table and hands each node's serialized markup on."""

    @property
    def name(self) -> str:
        return TableStrategy.NODE_QUERY.value

    def available(self, document: FetchedDocument) -> bool:
        return document.node_query is not None

    def locate(self, document: FetchedDocument, raw_markup: str) -> list[CellSource]:
        return [MarkupCellSource(node.outer_html) for node in document.node_query.xpath("//table")]


class RegexLocator(TableLocator):
    """Scans the raw text for <table>...</table> spans, nested ones included."""

    @property
    def name(self) -> str:
        return TableStrategy.REGEX.value

    def locate(self, document: FetchedDocument, raw_markup: str) -> list[CellSource]:
        return [MarkupCellSource(raw_markup[start:end]) for start, end in table_spans(raw_markup)]


LOCATORS: dict[TableStrategy, type[TableLocator]] = {
    TableStrategy.DOM: DomLocator,
    TableStrategy.NODE_QUERY: NodeQueryLocator,
    TableStrategy.REGEX: RegexLocator,
}


@dataclass(frozen=True)
class TableExtraction:
    """Tables found by one extraction call and the strategy that found them."""

    strategy: str | None = None
    tables: list[TableRecord] = field(default_factory=list)


class TableExtractor:
    """Chain of table locators with first-success selection.

    Holds only the configured locator order; every call reports its own
    outcome through a TableExtraction.
    """

    def __init__(self, strategies: Iterable[TableStrategy | str] | None = None) -> None:
        """Initialize the extractor.

        Args:
            strategies: Strategy names to try, in order (default: all three,
                highest fidelity first)
        """
        order = [TableStrategy(s) for s in strategies] if strategies else list(LOCATORS)
        self.locators: list[TableLocator] = [LOCATORS[strategy]() for strategy in order]

    def run(
        self,
        document: FetchedDocument | str,
        raw_markup: str | None = None,
    ) -> TableExtraction:
        """Extract every table from a document.

        Args:
            document: Fetched document, or raw HTML to parse first
            raw_markup: Text for the regex strategy (default: the document body)

        Returns:
            TableExtraction with records indexed 0..N-1 in discovery order and
            the name of the strategy used; no strategy and no tables when
            nothing was found. Never raises.
        """
        if isinstance(document, str):
            document = FetchedDocument.from_markup(document)
        if raw_markup is None:
            raw_markup = document.html

        for locator in self.locators:
            if not locator.available(document):
                logger.debug(f"Strategy {locator.name} unavailable, skipping")
                continue

            try:
                sources = locator.locate(document, raw_markup)
            except Exception as e:
                logger.debug(f"Strategy {locator.name} failed: {e}")
                continue

            if not sources:
                logger.debug(f"Strategy {locator.name} found no tables")
                continue

            logger.debug(
                f"Strategy {locator.name} found {len(sources)} table(s)",
                extra={"strategy": locator.name},
            )
            return TableExtraction(
                strategy=locator.name,
                tables=[build_table_record(source, index) for index, source in enumerate(sources)],
            )

        return TableExtraction()

    def extract(
        self,
        document: FetchedDocument | str,
        raw_markup: str | None = None,
    ) -> list[TableRecord]:
        """Extract every table from a document; see run()."""
        return self.run(document, raw_markup).tables


def extract_tables(
    document: FetchedDocument | str,
    raw_markup: str | None = None,
    strategies: Iterable[TableStrategy | str] | None = None,
) -> list[TableRecord]:
    """Extract tables using the first strategy that finds any."""
    return TableExtractor(strategies).extract(document, raw_markup)
