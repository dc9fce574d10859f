# Copyright (c) Syntropy Systems
"""Tests for the observable page and table helpers."""

from bs4 import BeautifulSoup

from gradewatch.dom import (
    MutationRecord,
    Page,
    body_region,
    cell_text,
    data_rows,
    header_cells,
    row_cells,
    table_rows,
)


def _table(markup: str):
    return BeautifulSoup(markup, "html.parser").find("table")


class TestTableHelpers:
    """Tests for the table structure helpers."""

    def test_header_from_thead(self):
        """Test that header cells come from the first thead row."""
        table = _table(
            "<table><thead><tr><th>Kurs</th><th>hp</th></tr></thead>"
            "<tbody><tr><td>A</td><td>1</td></tr></tbody></table>"
        )
        assert [c.get_text() for c in header_cells(table)] == ["Kurs", "hp"]

    def test_header_from_first_row_without_thead(self):
        """Test that the first row is the header when there is no thead."""
        table = _table("<table><tr><td>Kurs</td></tr><tr><td>A</td></tr></table>")
        assert [c.get_text() for c in header_cells(table)] == ["Kurs"]

    def test_empty_thead_falls_back_to_first_row(self):
        """Test that an empty thead does not hide the first row."""
        table = _table("<table><thead></thead><tr><td>Kurs</td></tr></table>")
        assert [c.get_text() for c in header_cells(table)] == ["Kurs"]

    def test_data_rows_prefer_tbody(self):
        """Test that every tbody row is data and thead rows are not."""
        table = _table(
            "<table><thead><tr><th>h</th></tr></thead>"
            "<tbody><tr><td>1</td></tr></tbody><tbody><tr><td>2</td></tr></tbody></table>"
        )
        assert [r.get_text() for r in data_rows(table)] == ["1", "2"]

    def test_data_rows_without_tbody_skip_first_row(self):
        """Test that the first row is treated as header without tbody."""
        table = _table("<table><tr><td>h</td></tr><tr><td>1</td></tr><tr><td>2</td></tr></table>")
        assert [r.get_text() for r in data_rows(table)] == ["1", "2"]

    def test_single_row_table_has_no_data(self):
        """Test a table with only a header row."""
        table = _table("<table><tr><td>h</td></tr></table>")
        assert data_rows(table) == []

    def test_table_rows_order(self):
        """Test thead rows come first and tfoot rows last."""
        table = _table(
            "<table><tfoot><tr><td>f</td></tr></tfoot><tr><td>b</td></tr>"
            "<thead><tr><td>h</td></tr></thead></table>"
        )
        assert [r.get_text() for r in table_rows(table)] == ["h", "b", "f"]

    def test_nested_table_rows_not_included(self):
        """Test that rows of nested tables are not rows of the outer table."""
        table = _table(
            "<table><tr><td>h</td></tr>"
            "<tr><td><table><tr><td>inner</td></tr></table></td></tr></table>"
        )
        assert len(table_rows(table)) == 2
        assert len(row_cells(table_rows(table)[1])) == 1

    def test_cell_text_bounds(self):
        """Test that missing cells read as empty text."""
        table = _table("<table><tr><td> A </td><th>B</th></tr></table>")
        row = table_rows(table)[0]
        assert cell_text(row, 0) == "A"
        assert cell_text(row, 1) == "B"
        assert cell_text(row, 2) == ""
        assert cell_text(row, -1) == ""
        assert cell_text(row, None) == ""

    def test_body_region(self):
        """Test the observed region is the first tbody, else the table."""
        with_body = _table("<table><tbody><tr><td>1</td></tr></tbody></table>")
        assert body_region(with_body).name == "tbody"
        without_body = _table("<table><tr><td>1</td></tr></table>")
        assert body_region(without_body) is without_body


class TestPageObservation:
    """Tests for Page mutation notifications."""

    def test_append_notifies_subtree_observer(self):
        """Test that appended rows are reported to an ancestor observer."""
        page = Page("<body><table><tbody></tbody></table></body>")
        tbody = page.soup.find("tbody")
        seen: list[list[MutationRecord]] = []
        page.observe(page.body, seen.append)

        page.append_html(tbody, "<tr><td>1</td></tr>")

        assert len(seen) == 1
        assert seen[0][0].kind == "childList"
        assert seen[0][0].target is tbody
        assert len(tbody.find_all("tr")) == 1

    def test_non_subtree_observer_ignores_descendants(self):
        """Test that subtree=False only sees changes to the target itself."""
        page = Page("<body><div><p>x</p></div></body>")
        seen: list[list[MutationRecord]] = []
        page.observe(page.body, seen.append, subtree=False)

        page.append_html(page.soup.find("div"), "<span>y</span>")
        assert seen == []

        page.append_html(page.body, "<span>z</span>")
        assert len(seen) == 1

    def test_character_data_requires_opt_in(self):
        """Test that text edits are only reported with character_data."""
        page = Page("<body><table><tbody><tr><td>4</td></tr></tbody></table></body>")
        cell = page.soup.find("td")
        structural: list[list[MutationRecord]] = []
        textual: list[list[MutationRecord]] = []
        page.observe(page.body, structural.append)
        page.observe(page.body, textual.append, character_data=True)

        page.set_text(cell, "5")

        assert structural == []
        assert len(textual) == 1
        assert textual[0][0].kind == "characterData"
        assert cell.get_text() == "5"

    def test_batch_delivers_once(self):
        """Test that a batch coalesces records into one delivery."""
        page = Page("<body><table><tbody></tbody></table></body>")
        tbody = page.soup.find("tbody")
        seen: list[list[MutationRecord]] = []
        page.observe(tbody, seen.append)

        with page.batch():
            for i in range(3):
                page.append_html(tbody, f"<tr><td>{i}</td></tr>")
            assert seen == []

        assert len(seen) == 1
        assert len(seen[0]) == 3

    def test_disconnect_stops_delivery(self):
        """Test that a disconnected observer hears nothing more."""
        page = Page("<body></body>")
        seen: list[list[MutationRecord]] = []
        subscription = page.observe(page.body, seen.append)
        subscription.disconnect()

        page.append_html(page.body, "<p>x</p>")

        assert seen == []
        assert page.observer_count == 0

    def test_remove_and_contains(self):
        """Test that removed nodes are no longer in the document."""
        page = Page("<body><table><tr><td>x</td></tr></table></body>")
        table = page.soup.find("table")
        assert page.contains(table)

        page.remove(table)

        assert not page.contains(table)
        assert page.tables() == []

    def test_replace_html_swaps_body(self):
        """Test that replace_html detaches the old content."""
        page = Page("<html><body><table id='old'></table></body></html>")
        old = page.soup.find("table")
        seen: list[list[MutationRecord]] = []
        page.observe(page.body, seen.append)

        page.replace_html("<html><body><table id='new'></table></body></html>")

        assert not page.contains(old)
        assert [t.get("id") for t in page.tables()] == ["new"]
        assert len(seen) == 1

    def test_page_without_body(self):
        """Test that a fragment without <body> uses the document root."""
        page = Page("<table><tr><td>x</td></tr></table>")
        assert page.body is page.soup
        assert len(page.tables()) == 1
