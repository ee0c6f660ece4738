"""
Cell sources: uniform access to a table's caption, headers and rows.

Two adapters exist. DomCellSource walks a BeautifulSoup <table> element;
MarkupCellSource scans the table's serialized markup with regular
expressions for environments where no tree is available. Both return
cleaned, whitespace-collapsed text so the normalizer never sees markup.
"""

from __future__ import annotations

import html as html_lib
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from bs4.element import Tag

from .base import collapse_whitespace, strip_tags

_FLAGS = re.IGNORECASE | re.DOTALL

TABLE_TAG_PATTERN = re.compile(r"<(/?)table\b[^>]*>", _FLAGS)
CAPTION_PATTERN = re.compile(r"<caption\b[^>]*>(.*?)</caption\s*>", _FLAGS)
THEAD_PATTERN = re.compile(r"<thead\b[^>]*>(.*?)</thead\s*>", _FLAGS)

# Rows and cells end at their closing tag, or at the next sibling when the
# closing tag was left out.
ROW_PATTERN = re.compile(
    r"<tr\b[^>]*>(.*?)(?:</tr\s*>|(?=<tr\b|</thead|</tbody|</tfoot|</table|\Z))",
    _FLAGS,
)
TH_PATTERN = re.compile(r"<th\b[^>]*>(.*?)(?:</th\s*>|(?=<t[dh]\b|</tr|\Z))", _FLAGS)
TD_PATTERN = re.compile(r"<td\b[^>]*>(.*?)(?:</td\s*>|(?=<t[dh]\b|</tr|\Z))", _FLAGS)


@dataclass(frozen=True)
class RowCells:
    """Texts of one <tr>: its data cells and its header cells."""

    data: list[str] = field(default_factory=list)
    header: list[str] = field(default_factory=list)

    @property
    def is_header_row(self) -> bool:
        """A row made only of <th> cells."""
        return bool(self.header) and not self.data


class CellSource(ABC):
    """Read access to one located table."""

    @abstractmethod
    def caption(self) -> str:
        """Caption text, or an empty string."""

    @abstractmethod
    def header_cells(self) -> list[str]:
        """Header texts from <thead>, else every <th> in the table."""

    @abstractmethod
    def rows(self) -> list[RowCells]:
        """Candidate rows in document order."""


class DomCellSource(CellSource):
    """Cell source over a parsed <table> element.

    Only the table's own sections and rows are read; tables nested inside
    a cell are located separately and contribute nothing here except the
    text of the cell that holds them.
    """

    def __init__(self, table: Tag):
        self.table = table

    @staticmethod
    def _text(element: Tag) -> str:
        return collapse_whitespace(element.get_text(" "))

    def _own_rows(self) -> list[Tag]:
        """<tr> elements directly under the table or its row groups."""
        rows: list[Tag] = []
        for child in self.table.find_all(["tr", "thead", "tbody", "tfoot"], recursive=False):
            if child.name == "tr":
                rows.append(child)
            else:
                rows.extend(child.find_all("tr", recursive=False))
        return rows

    def caption(self) -> str:
        caption = self.table.find("caption", recursive=False)
        return self._text(caption) if caption is not None else ""

    def header_cells(self) -> list[str]:
        cells: list[Tag] = []
        thead = self.table.find("thead", recursive=False)
        if thead is not None:
            cells = thead.find_all("th")
        if not cells:
            cells = [th for tr in self._own_rows() for th in tr.find_all("th", recursive=False)]
        return [self._text(cell) for cell in cells]

    def rows(self) -> list[RowCells]:
        # Body rows only when the table declares at least one <tbody>
        tbodies = self.table.find_all("tbody", recursive=False)
        if tbodies:
            trs = [tr for tbody in tbodies for tr in tbody.find_all("tr", recursive=False)]
        else:
            trs = self._own_rows()
        return [
            RowCells(
                data=[self._text(cell) for cell in tr.find_all("td", recursive=False)],
                header=[self._text(cell) for cell in tr.find_all("th", recursive=False)],
            )
            for tr in trs
        ]


def flatten_nested_tables(markup: str) -> str:
    """Replace tables nested inside a table's markup with their plain text.

    The outer table keeps its own tags. Each nested table collapses to the
    escaped text it would show inside its cell, so the row and cell
    patterns only ever see the outer table's structure.
    """
    opening = TABLE_TAG_PATTERN.search(markup)
    start = opening.end() if opening and not opening.group(1) else 0

    pieces = [markup[:start]]
    depth = 0
    last = start
    nested_start = 0
    for tag in TABLE_TAG_PATTERN.finditer(markup, start):
        if not tag.group(1):
            if depth == 0:
                nested_start = tag.start()
            depth += 1
        elif depth:
            depth -= 1
            if depth == 0:
                pieces.append(markup[last:nested_start])
                pieces.append(html_lib.escape(strip_tags(markup[nested_start:tag.end()]), quote=False))
                last = tag.end()

    pieces.append(markup[last:])
    return "".join(pieces)


def table_spans(markup: str) -> list[tuple[int, int]]:
    """(start, end) of every closed <table> element, nested ones included.

    Spans come back in order of their opening tags. An opening tag that is
    never closed yields no span.
    """
    spans: list[tuple[int, int]] = []
    open_starts: list[int] = []
    for tag in TABLE_TAG_PATTERN.finditer(markup):
        if not tag.group(1):
            open_starts.append(tag.start())
        elif open_starts:
            spans.append((open_starts.pop(), tag.end()))
    return sorted(spans)


class MarkupCellSource(CellSource):
    """Cell source over a table's serialized markup.

    Rows are taken from the whole table, so a header row living in
    <thead> shows up as row 0 here; the normalizer skips it because it
    has no <td> cells. Nested tables are flattened to text first.
    """

    def __init__(self, markup: str):
        self.markup = markup
        self._own = flatten_nested_tables(markup)

    def caption(self) -> str:
        match = CAPTION_PATTERN.search(self._own)
        return strip_tags(match.group(1)) if match else ""

    def header_cells(self) -> list[str]:
        thead = THEAD_PATTERN.search(self._own)
        cells: list[str] = []
        if thead:
            cells = TH_PATTERN.findall(thead.group(1))
        if not cells:
            cells = TH_PATTERN.findall(self._own)
        return [strip_tags(cell) for cell in cells]

    def rows(self) -> list[RowCells]:
        return [
            RowCells(
                data=[strip_tags(cell) for cell in TD_PATTERN.findall(row)],
                header=[strip_tags(cell) for cell in TH_PATTERN.findall(row)],
            )
            for row in ROW_PATTERN.findall(self._own)
        ]
