"""
Extraction data structures.

Output records for tables, links, images and the composite page result.
"""

from __future__ import annotations

import html as html_lib
import re
from dataclasses import dataclass, field
from typing import Any, Union

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]+>", re.DOTALL)

# A finalized row: keyed by header, or the raw cell list when no header exists
Row = Union[dict[str, "str | None"], list[str]]


def collapse_whitespace(text: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def strip_tags(markup: str | None) -> str:
    """Turn a markup fragment into clean text.

    Tags become spaces, entities are decoded, whitespace is collapsed.
    """
    if not markup:
        return ""
    return collapse_whitespace(html_lib.unescape(_TAG.sub(" ", markup)))


@dataclass(frozen=True)
class TableRecord:
    """One extracted HTML table."""

    index: int
    caption: str = ""
    headers: tuple[str, ...] = ()
    rows: tuple[Row, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_keyed(self) -> bool:
        """Whether rows are keyed by header rather than raw cell lists."""
        return bool(self.rows) and isinstance(self.rows[0], dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "caption": self.caption,
            "headers": list(self.headers),
            "rows": [dict(row) if isinstance(row, dict) else list(row) for row in self.rows],
            "rowCount": self.row_count,
        }


@dataclass(frozen=True)
class Link:
    """Anchor with an absolute href."""

    href: str
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"href": self.href, "text": self.text}


@dataclass(frozen=True)
class Image:
    """Image with an absolute src."""

    src: str
    alt: str = ""
    width: str | None = None
    height: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"src": self.src, "alt": self.alt, "width": self.width, "height": self.height}


@dataclass
class PageData:
    """Everything extracted from one page plus response metadata."""

    url: str
    final_url: str | None = None
    status_code: int | None = None
    content_length: int | None = None
    content_type: str | None = None
    last_modified: str | None = None

    title: str = ""
    text: str = ""
    links: list[Link] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    tables: list[TableRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "final_url": self.final_url,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "content_type": self.content_type,
            "last_modified": self.last_modified,
            "title": self.title,
            "text": self.text,
            "links": [link.to_dict() for link in self.links],
            "images": [image.to_dict() for image in self.images],
            "tables": [table.to_dict() for table in self.tables],
        }
