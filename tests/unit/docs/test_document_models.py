"""Unit tests for parsing Docs API JSON into the document tree."""

from typing import Any

import pytest

from gdrive_mcp.docs.models import (
    Body,
    Document,
    InlineElement,
    OpaqueElement,
    Paragraph,
    SectionBreak,
    Table,
    TextRun,
    nesting_violations,
    parse_structural_element,
)


def _insert_text_at(node: Any, offset: int, text: str) -> None:
    """Apply an insertion to raw document JSON the way the service would.

    The run containing ``offset`` gains the text; every index past it shifts.
    """
    if isinstance(node, list):
        for item in node:
            _insert_text_at(item, offset, text)
        return
    if not isinstance(node, dict):
        return

    start, end = node.get("startIndex"), node.get("endIndex")
    run = node.get("textRun")
    if run is not None and start is not None and start <= offset < end:
        position = offset - start
        run["content"] = run["content"][:position] + text + run["content"][position:]
    if start is not None and start > offset:
        node["startIndex"] = start + len(text)
    if end is not None and end > offset:
        node["endIndex"] = end + len(text)

    for value in node.values():
        _insert_text_at(value, offset, text)


@pytest.mark.unit
class TestParseStructuralElement:
    """Tests for parse_structural_element()."""

    def test_should_parse_paragraph_with_runs_and_chips(self) -> None:
        """Verify text runs and inline elements keep their offsets."""
        raw = {
            "startIndex": 1,
            "endIndex": 9,
            "paragraph": {
                "elements": [
                    {"startIndex": 1, "endIndex": 5, "textRun": {"content": "Hi, "}},
                    {
                        "startIndex": 5,
                        "endIndex": 6,
                        "person": {"personProperties": {"email": "a@example.com"}},
                    },
                    {"startIndex": 6, "endIndex": 9, "textRun": {"content": "!!\n"}},
                ],
                "paragraphStyle": {"namedStyleType": "HEADING_1"},
            },
        }

        element = parse_structural_element(raw)

        assert isinstance(element, Paragraph)
        assert element.text == "Hi, !!\n"
        assert len(element.text_runs) == 2
        assert isinstance(element.elements[1], InlineElement)
        assert element.elements[1].kind == "person"
        assert element.paragraph_style["namedStyleType"] == "HEADING_1"

    def test_should_parse_table_cells(self, doc_json) -> None:
        """Verify tables expose rows, cells and cell content."""
        element = parse_structural_element(doc_json.table([["a", "b"], ["c", "d"]], 10))

        assert isinstance(element, Table)
        assert element.columns == 2
        assert len(element.rows) == 2
        cell = element.cell(1, 0)
        assert isinstance(cell.content[0], Paragraph)
        assert cell.content[0].text == "c\n"
        assert element.cell(2, 0) is None
        assert element.cell(0, 5) is None

    def test_should_keep_unknown_elements_opaque(self) -> None:
        """Verify unsupported structures are preserved with their offsets."""
        element = parse_structural_element(
            {"startIndex": 3, "endIndex": 40, "tableOfContents": {"content": []}}
        )

        assert isinstance(element, OpaqueElement)
        assert element.api_kind == "tableOfContents"
        assert (element.start_index, element.end_index) == (3, 40)

    def test_should_parse_leading_section_break(self) -> None:
        """Verify a section break without startIndex starts at 0."""
        element = parse_structural_element({"endIndex": 1, "sectionBreak": {}})

        assert isinstance(element, SectionBreak)
        assert element.start_index == 0

    def test_should_allow_runs_without_offsets(self) -> None:
        """Verify partial field masks do not break parsing."""
        element = parse_structural_element(
            {"paragraph": {"elements": [{"textRun": {"content": "x"}}]}}
        )

        run = element.elements[0]
        assert isinstance(run, TextRun)
        assert run.start_index is None


@pytest.mark.unit
class TestDocument:
    """Tests for Document and tab lookup."""

    def test_should_use_legacy_body_without_tabs(self, doc_json) -> None:
        """Verify body_for() falls back to the top-level body."""
        document = Document.from_api(doc_json.document(doc_json.body("Hello")))

        assert document.tabs == []
        assert document.body_for().end_index == 7
        assert document.body_for("missing") is None

    def test_should_walk_nested_tabs_depth_first(self, doc_json) -> None:
        """Verify iter_tabs() yields parents before children."""
        child = doc_json.tab("t.child", "Child", doc_json.body("c"), nesting_level=1,
                             parent_tab_id="t.one")
        raw = doc_json.tabbed_document(
            [
                doc_json.tab("t.one", "One", doc_json.body("first"), child_tabs=[child]),
                doc_json.tab("t.two", "Two", doc_json.body("second"), index=1),
            ]
        )

        document = Document.from_api(raw)

        assert [tab.tab_id for tab in document.iter_tabs()] == ["t.one", "t.child", "t.two"]
        assert document.find_tab("t.child").parent_tab_id == "t.one"
        assert document.body_for() is document.tabs[0].body
        assert document.body_for("t.two").content[1].text == "second\n"

    def test_should_report_end_index_of_empty_body(self) -> None:
        """Verify an empty body ends at the first body offset."""
        assert Body().end_index == 1


@pytest.mark.unit
class TestNestingViolations:
    """Tests for the structural offset invariant."""

    def test_should_accept_generated_document(self, doc_json) -> None:
        """Verify well-formed content (paragraphs and tables) has no violations."""
        content = doc_json.body("Intro", "More text")
        content.append(doc_json.table([["a", "bb"], ["ccc", "d"]], content[-1]["endIndex"]))
        body = Body.from_api({"content": content})

        assert nesting_violations(body.content) == []

    def test_should_accept_cell_containing_paragraph(self) -> None:
        """Verify a cell [20,30) containing paragraph [22,28) is valid."""
        raw: dict[str, Any] = {
            "startIndex": 18,
            "endIndex": 31,
            "table": {
                "rows": 1,
                "columns": 1,
                "tableRows": [
                    {
                        "startIndex": 19,
                        "endIndex": 30,
                        "tableCells": [
                            {
                                "startIndex": 20,
                                "endIndex": 30,
                                "content": [
                                    {
                                        "startIndex": 22,
                                        "endIndex": 28,
                                        "paragraph": {"elements": []},
                                    }
                                ],
                            }
                        ],
                    }
                ],
            },
        }
        table = parse_structural_element(raw)

        assert nesting_violations([table]) == []

    def test_should_stay_nested_after_insertion_in_cell(self, doc_json) -> None:
        """Verify offsets shifted by an edit inside a cell still nest."""
        content = doc_json.body("Intro", "More text")
        content.append(doc_json.table([["a", "bb"], ["ccc", "d"]], 17))
        content.append(doc_json.paragraph("Outro", 36))
        assert nesting_violations(Body.from_api({"content": content}).content) == []

        _insert_text_at(content, 24, "xyz")
        body = Body.from_api({"content": content})

        assert nesting_violations(body.content) == []
        table = body.content[3]
        assert isinstance(table, Table)
        assert (table.start_index, table.end_index) == (17, 39)
        assert table.cell(0, 1).content[0].text == "bxyzb\n"
        assert (body.content[4].start_index, body.content[4].end_index) == (39, 45)

    def test_should_flag_escaping_and_overlapping_elements(self) -> None:
        """Verify children outside their parent and overlapping siblings are reported."""
        body = Body.from_api(
            {
                "content": [
                    {
                        "startIndex": 1,
                        "endIndex": 5,
                        "paragraph": {
                            "elements": [
                                {"startIndex": 1, "endIndex": 7, "textRun": {"content": "abcdef"}}
                            ]
                        },
                    },
                    {"startIndex": 4, "endIndex": 8, "paragraph": {"elements": []}},
                ]
            }
        )

        violations = nesting_violations(body.content)

        assert len(violations) == 2
        assert any("outside paragraph" in v for v in violations)
        assert any("overlapping previous sibling" in v for v in violations)
