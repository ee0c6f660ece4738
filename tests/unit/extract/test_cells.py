"""Tests for extract/cells.py: DOM and markup cell sources."""

from __future__ import annotations

from pagegrab.core.document import FetchedDocument
from pagegrab.core.extract.base import collapse_whitespace, strip_tags
from pagegrab.core.extract.cells import (
    DomCellSource,
    MarkupCellSource,
    RowCells,
    flatten_nested_tables,
    table_spans,
)

NESTED_TABLE = (
    "<table><tr><th>Name</th><th>Detail</th></tr>"
    "<tr><td>outer</td><td><table><thead><tr><th>X</th></tr></thead>"
    "<tbody><tr><td>inner</td></tr></tbody></table></td></tr></table>"
)


def _dom_source(markup: str) -> DomCellSource:
    return DomCellSource(FetchedDocument.from_markup(markup).dom.find("table"))


class TestTextCleaning:
    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \n\t b  ") == "a b"
        assert collapse_whitespace(None) == ""

    def test_strip_tags_spaces_and_entities(self):
        assert strip_tags("Fish&nbsp;&amp;<br/>Chips") == "Fish & Chips"
        assert strip_tags("<span class='x'>\n  Total </span>") == "Total"

    def test_strip_tags_multiline_tag(self):
        assert strip_tags('<a\n href="x">link</a>') == "link"


class TestMarkupCellSource:
    def test_thead_headers_preferred(self):
        source = MarkupCellSource(
            "<table><thead><tr><th>A</th></tr></thead>"
            "<tbody><tr><th>side</th><td>1</td></tr></tbody></table>"
        )
        assert source.header_cells() == ["A"]

    def test_global_th_without_thead(self):
        source = MarkupCellSource("<table><tr><th>A</th><th>B</th></tr><tr><th>C</th></tr></table>")
        assert source.header_cells() == ["A", "B", "C"]

    def test_attributes_and_case(self):
        source = MarkupCellSource(
            '<TABLE class="t"><TR class="r"><TH scope="col">A</TH></TR>'
            '<TR><TD align="right">1</TD></TR></TABLE>'
        )
        assert source.header_cells() == ["A"]
        assert source.rows() == [RowCells(header=["A"]), RowCells(data=["1"])]

    def test_thead_tag_not_mistaken_for_th(self):
        source = MarkupCellSource("<table><thead></thead><tr><td>1</td></tr></table>")
        assert source.header_cells() == []

    def test_rows_span_thead_and_tbody(self, simple_table):
        rows = MarkupCellSource(simple_table).rows()
        assert rows == [
            RowCells(header=["A", "B"]),
            RowCells(data=["1", "2"]),
            RowCells(data=["3", "4"]),
        ]

    def test_unclosed_cells_and_rows(self):
        source = MarkupCellSource("<table><tr><td>1<td>2<tr><td>3<td>4</table>")
        assert [row.data for row in source.rows()] == [["1", "2"], ["3", "4"]]

    def test_empty_row(self):
        assert MarkupCellSource("<table><tr></tr></table>").rows() == [RowCells()]

    def test_caption(self):
        source = MarkupCellSource("<table><caption>\n Pop. <b>2020</b> est.\n</caption></table>")
        assert source.caption() == "Pop. 2020 est."

    def test_missing_caption(self):
        assert MarkupCellSource("<table><tr><td>1</td></tr></table>").caption() == ""


class TestDomCellSource:
    def test_caption_and_headers(self):
        source = _dom_source(
            "<table><caption>Pop. <b>2020</b> est.</caption>"
            "<thead><tr><th> A </th><th>B</th></tr></thead>"
            "<tbody><tr><td>1</td><td>2</td></tr></tbody></table>"
        )
        assert source.caption() == "Pop. 2020 est."
        assert source.header_cells() == ["A", "B"]

    def test_rows_from_tbody_only(self, simple_table):
        assert _dom_source(simple_table).rows() == [
            RowCells(data=["1", "2"]),
            RowCells(data=["3", "4"]),
        ]

    def test_rows_from_table_without_tbody(self):
        source = _dom_source("<table><tr><th>A</th></tr><tr><td>1</td></tr></table>")
        rows = source.rows()
        assert rows[-1] == RowCells(data=["1"])
        assert rows[0].is_header_row

    def test_cell_text_collapsed(self):
        source = _dom_source("<table><tr><td>\n  New\n  York </td></tr></table>")
        assert source.rows()[0].data == ["New York"]

    def test_entities_decoded(self):
        source = _dom_source("<table><tr><td>Fish &amp; Chips</td></tr></table>")
        assert source.rows()[0].data == ["Fish & Chips"]

    def test_nested_table_does_not_leak_into_outer(self):
        source = _dom_source(NESTED_TABLE)

        assert source.header_cells() == ["Name", "Detail"]
        assert source.rows() == [
            RowCells(header=["Name", "Detail"]),
            RowCells(data=["outer", "X inner"]),
        ]

    def test_nested_caption_ignored(self):
        source = _dom_source(
            "<table><tr><td><table><caption>Inner</caption><tr><td>1</td></tr></table></td></tr></table>"
        )
        assert source.caption() == ""

    def test_rows_from_every_tbody(self):
        source = _dom_source(
            "<table><thead><tr><th>A</th></tr></thead>"
            "<tbody><tr><td>1</td></tr></tbody><tbody><tr><td>2</td></tr></tbody></table>"
        )
        assert source.rows() == [RowCells(data=["1"]), RowCells(data=["2"])]

    def test_thead_rows_kept_without_tbody(self):
        # Parsed with lxml, which adds no implicit <tbody>
        source = _dom_source("<table><thead><tr><th>A</th></tr></thead><tr><td>1</td></tr></table>")
        assert source.rows() == [RowCells(header=["A"]), RowCells(data=["1"])]


class TestNestedMarkup:
    def test_flatten_keeps_outer_structure(self):
        assert flatten_nested_tables(NESTED_TABLE) == (
            "<table><tr><th>Name</th><th>Detail</th></tr>"
            "<tr><td>outer</td><td>X inner</td></tr></table>"
        )

    def test_flatten_escapes_nested_text(self):
        flat = flatten_nested_tables("<table><tr><td><table><tr><td>a &lt;b&gt;</td></tr></table></td></tr></table>")
        assert flat == "<table><tr><td>a &lt;b&gt;</td></tr></table>"

    def test_flatten_without_nesting_is_identity(self, simple_table):
        assert flatten_nested_tables(simple_table) == simple_table

    def test_markup_source_sees_outer_table_only(self):
        source = MarkupCellSource(NESTED_TABLE)

        assert source.header_cells() == ["Name", "Detail"]
        assert [row.data for row in source.rows()] == [[], ["outer", "X inner"]]
        assert source.markup == NESTED_TABLE

    def test_table_spans_nested_in_document_order(self):
        markup = f"<p>x</p>{NESTED_TABLE}<table><tr><td>last</td></tr></table>"
        spans = table_spans(markup)

        assert [markup[start:end][:16] for start, end in spans] == [
            "<table><tr><th>N",
            "<table><thead><t",
            "<table><tr><td>l",
        ]
        assert markup[slice(*spans[0])] == NESTED_TABLE

    def test_table_spans_skip_unclosed(self):
        assert table_spans("<table><tr><td>open") == []
