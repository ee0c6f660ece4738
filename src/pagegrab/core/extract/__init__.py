"""Extraction of tables, links, images and text from HTML."""

from .base import Image, Link, PageData, Row, TableRecord, collapse_whitespace, strip_tags
from .cells import CellSource, DomCellSource, MarkupCellSource, RowCells
from .locators import (
    DomLocator,
    NodeQueryLocator,
    RegexLocator,
    TableExtraction,
    TableExtractor,
    TableLocator,
    extract_tables,
)
from .normalize import build_table_record, normalize_table, normalize_table_from_markup
from .page import extract_images, extract_links, extract_text, extract_title

__all__ = [
    # Records
    "TableRecord",
    "Row",
    "Link",
    "Image",
    "PageData",
    # Text helpers
    "collapse_whitespace",
    "strip_tags",
    # Cell sources
    "CellSource",
    "DomCellSource",
    "MarkupCellSource",
    "RowCells",
    # Tables
    "TableLocator",
    "DomLocator",
    "NodeQueryLocator",
    "RegexLocator",
    "TableExtraction",
    "TableExtractor",
    "extract_tables",
    "build_table_record",
    "normalize_table",
    "normalize_table_from_markup",
    # Page
    "extract_title",
    "extract_text",
    "extract_links",
    "extract_images",
]
