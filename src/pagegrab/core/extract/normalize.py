"""
Table normalization.

Turns whatever a cell source exposes into a TableRecord with clean
header names and rows keyed by header. The same rules apply whether the
table came from a parsed tree or from raw markup.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from bs4.element import Tag

from pagegrab.core.logging import get_logger

from .base import Row, TableRecord
from .cells import CellSource, DomCellSource, MarkupCellSource, RowCells

logger = get_logger("extract.normalize")

T = TypeVar("T")

SYNTHETIC_HEADER = "Column{}"


def _attempt(step: Callable[[], T], default: T, what: str, index: int) -> T:
    """Run one read against a cell source, treating failure as empty."""
    try:
        return step()
    except Exception as e:
        logger.debug(f"Table {index}: reading {what} failed ({e}), treating as empty")
        return default


def _add_header(headers: list[str], text: str) -> None:
    # Blank headers are named by their running position
    headers.append(text or SYNTHETIC_HEADER.format(len(headers) + 1))


def _pad_headers(headers: list[str], width: int) -> None:
    while len(headers) < width:
        headers.append(SYNTHETIC_HEADER.format(len(headers) + 1))


def _unique_headers(headers: list[str]) -> list[str]:
    """Suffix repeated names so each header keys its own column."""
    seen: set[str] = set()
    unique: list[str] = []
    for name in headers:
        candidate = name
        suffix = 2
        while candidate in seen:
            candidate = f"{name}_{suffix}"
            suffix += 1
        seen.add(candidate)
        unique.append(candidate)
    return unique


def _row_values(row_index: int, row: RowCells) -> list[str]:
    if row.data:
        return row.data
    # Body rows that only use <th> still carry data
    if row_index > 0:
        return row.header
    return []


def build_table_record(source: CellSource, index: int) -> TableRecord:
    """Normalize one table.

    Rows are collected first and keyed afterwards, once the final header
    list is known, so every keyed row has exactly one entry per header.

    Args:
        source: Cell source for the table
        index: Position of the table in the document

    Returns:
        TableRecord; unreadable parts come back empty instead of raising
    """
    caption = _attempt(source.caption, "", "caption", index)

    headers: list[str] = []
    for text in _attempt(source.header_cells, [], "headers", index):
        _add_header(headers, text)

    value_rows: list[list[str]] = []
    for row_index, row in enumerate(_attempt(source.rows, [], "rows", index)):
        if row_index == 0 and not headers and row.is_header_row:
            for text in row.header:
                _add_header(headers, text)
            continue

        values = _row_values(row_index, row)
        if not values:
            continue
        value_rows.append(values)

    widest = max((len(values) for values in value_rows), default=0)
    rows: list[Row]

    if headers:
        _pad_headers(headers, widest)
        headers = _unique_headers(headers)
        rows = [
            {name: (values[j] if j < len(values) else None) for j, name in enumerate(headers)}
            for values in value_rows
        ]
    else:
        # No header anywhere: rows stay raw cell lists even though Column<N>
        # names are synthesized below. Keyed rows only appear when the table
        # itself names a column; the synthesized names are not applied back.
        rows = [list(values) for values in value_rows]
        _pad_headers(headers, widest)

    return TableRecord(
        index=index,
        caption=caption,
        headers=tuple(headers),
        rows=tuple(rows),
    )


def normalize_table(table: Tag, index: int) -> TableRecord:
    """Normalize a parsed <table> element."""
    return build_table_record(DomCellSource(table), index)


def normalize_table_from_markup(markup: str, index: int) -> TableRecord:
    """Normalize a table given as serialized markup."""
    return build_table_record(MarkupCellSource(markup), index)
