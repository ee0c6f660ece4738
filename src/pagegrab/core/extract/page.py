"""
Page-level extraction: title, plain text, links and images.

Uses the lxml tree when the document has one and falls back to regex
scans of the raw markup otherwise.
"""

from __future__ import annotations

import html as html_lib
import re
from urllib.parse import urljoin

from pagegrab.core.document import FetchedDocument

from .base import Image, Link, collapse_whitespace, strip_tags

_FLAGS = re.IGNORECASE | re.DOTALL

TITLE_PATTERN = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", _FLAGS)
INVISIBLE_PATTERN = re.compile(r"<(script|style|noscript|template)\b[^>]*>.*?</\1\s*>", _FLAGS)
COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
ANCHOR_PATTERN = re.compile(r"<a\b([^>]*)>(.*?)</a\s*>", _FLAGS)
IMG_PATTERN = re.compile(r"<img\b([^>]*)>", _FLAGS)
ATTR_PATTERN = re.compile(r"""([a-zA-Z_:][-\w:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""")
BASE_PATTERN = re.compile(r"<base\b([^>]*)>", _FLAGS)

SKIPPED_HREF_PREFIXES = ("javascript:", "#")


def _attributes(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for match in ATTR_PATTERN.finditer(raw):
        name = match.group(1).lower()
        value = next(g for g in match.groups()[1:] if g is not None)
        attrs.setdefault(name, html_lib.unescape(value))
    return attrs


def base_url_for(document: FetchedDocument) -> str | None:
    """Resolve the base for relative URLs, honouring <base href>."""
    base_href: str | None = None
    tree = document.tree
    if tree is not None:
        hrefs = tree.xpath("//base/@href")
        base_href = str(hrefs[0]).strip() if hrefs else None
    else:
        match = BASE_PATTERN.search(document.html)
        if match:
            base_href = _attributes(match.group(1)).get("href", "").strip() or None

    if base_href:
        return urljoin(document.url, base_href) if document.url else base_href
    return document.url


def _absolute(base: str | None, ref: str) -> str:
    return urljoin(base, ref) if base else ref


def extract_title(document: FetchedDocument) -> str:
    tree = document.tree
    if tree is not None:
        title = tree.find(".//title")
        return collapse_whitespace(title.text_content()) if title is not None else ""
    match = TITLE_PATTERN.search(document.html)
    return strip_tags(match.group(1)) if match else ""


def extract_text(document: FetchedDocument) -> str:
    """Plain text of the page with scripts, styles and comments removed."""
    markup = COMMENT_PATTERN.sub(" ", document.html)
    markup = INVISIBLE_PATTERN.sub(" ", markup)
    return strip_tags(markup)


def extract_links(document: FetchedDocument) -> list[Link]:
    """Anchors with an href, resolved to absolute URLs, in document order."""
    base = base_url_for(document)
    links: list[Link] = []

    tree = document.tree
    if tree is not None:
        anchors = [
            (anchor.get("href", ""), anchor.text_content())
            for anchor in tree.iter("a")
            if anchor.get("href") is not None
        ]
    else:
        anchors = []
        for match in ANCHOR_PATTERN.finditer(document.html):
            href = _attributes(match.group(1)).get("href")
            if href is not None:
                anchors.append((href, html_lib.unescape(re.sub(r"<[^>]+>", " ", match.group(2)))))

    for href, text in anchors:
        href = href.strip()
        if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
            continue
        links.append(Link(href=_absolute(base, href), text=collapse_whitespace(text)))

    return links


def extract_images(document: FetchedDocument) -> list[Image]:
    """Images with a src, resolved to absolute URLs, in document order."""
    base = base_url_for(document)

    tree = document.tree
    if tree is not None:
        attr_sets = [dict(img.attrib) for img in tree.iter("img")]
    else:
        attr_sets = [_attributes(match.group(1)) for match in IMG_PATTERN.finditer(document.html)]

    images: list[Image] = []
    for attrs in attr_sets:
        src = (attrs.get("src") or "").strip()
        if not src:
            continue
        images.append(
            Image(
                src=_absolute(base, src),
                alt=collapse_whitespace(attrs.get("alt")),
                width=attrs.get("width"),
                height=attrs.get("height"),
            )
        )
    return images
