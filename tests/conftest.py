"""Shared test fixtures.

Sample pages and an httpx mock transport factory. No network access.
"""

from __future__ import annotations

from typing import Callable

import httpx
import pytest


SIMPLE_TABLE = (
    "<table><thead><tr><th>A</th><th>B</th></tr></thead><tbody>\n"
    "<tr><td>1</td><td>2</td></tr><tr><td>3</td><td>4</td></tr></tbody></table>"
)

HEADERLESS_TABLE = (
    "<table>"
    "<tr><td>a</td><td>b</td></tr>"
    "<tr><td>c</td><td>d</td></tr>"
    "</table>"
)

CAPTIONED_TABLE = (
    "<table>"
    "<caption>Pop. <b>2020</b> est.</caption>"
    "<tr><th>City</th><th>Population</th></tr>"
    "<tr><td>Oslo</td><td>709 037</td></tr>"
    "</table>"
)

THREE_TABLE_PAGE = f"""<!DOCTYPE html>
<html>
<head><title>  Three   tables </title></head>
<body>
<h1>Stats</h1>
{SIMPLE_TABLE}
<p>Between tables</p>
{HEADERLESS_TABLE}
{CAPTIONED_TABLE}
</body>
</html>
"""

ARTICLE_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Example &amp; Co</title>
  <style>body { color: red; }</style>
  <script>var hidden = "do not show";</script>
</head>
<body>
  <!-- a comment -->
  <h1>Hello   world</h1>
  <p>First <b>bold</b> paragraph.</p>
  <a href="/about">About <em>us</em></a>
  <a href="contact.html">Contact</a>
  <a href="https://other.example.org/x">Elsewhere</a>
  <a href="javascript:void(0)">Script link</a>
  <a href="#top">Top</a>
  <a name="anchor-without-href">Nothing</a>
  <img src="/img/logo.png" alt="Logo" width="120" height="40">
  <img src="photo.jpg">
  <img alt="no source">
</body>
</html>
"""


@pytest.fixture
def simple_table() -> str:
    return SIMPLE_TABLE


@pytest.fixture
def three_table_page() -> str:
    return THREE_TABLE_PAGE


@pytest.fixture
def article_page() -> str:
    return ARTICLE_PAGE


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport from a handler, recording every request."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return factory
