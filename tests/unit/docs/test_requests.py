"""Unit tests for update instruction builders and multi-step plans."""

import pytest

from gdrive_mcp.docs import requests as docs_requests
from gdrive_mcp.docs.errors import ValidationError
from gdrive_mcp.docs.models import Body, Table, parse_structural_element
from gdrive_mcp.docs.ranges import Range
from gdrive_mcp.docs.styles import TextStyle


@pytest.mark.unit
class TestSingleInstructions:
    """Tests for single-instruction builders."""

    def test_should_build_insert_text_with_tab(self) -> None:
        """Verify insertText targets a location in the given tab."""
        assert docs_requests.insert_text("Hi", 4, "t.1") == {
            "insertText": {"location": {"index": 4, "tabId": "t.1"}, "text": "Hi"}
        }

    def test_should_reject_insert_before_body(self) -> None:
        """Verify index 0 is rejected."""
        with pytest.raises(ValidationError):
            docs_requests.insert_text("Hi", 0)

    def test_should_build_delete_content_range(self) -> None:
        """Verify deleteContentRange serializes the range."""
        request = docs_requests.delete_content_range(Range(start_index=3, end_index=8))

        assert request == {"deleteContentRange": {"range": {"startIndex": 3, "endIndex": 8}}}

    def test_should_build_replace_all_text(self) -> None:
        """Verify replaceAllText carries match case."""
        request = docs_requests.replace_all_text("old", "new", match_case=True)

        assert request["replaceAllText"] == {
            "containsText": {"text": "old", "matchCase": True},
            "replaceText": "new",
        }
        with pytest.raises(ValidationError):
            docs_requests.replace_all_text("", "new")

    def test_should_build_insert_table(self) -> None:
        """Verify table dimensions are validated."""
        request = docs_requests.insert_table(2, 3, 5)

        assert request == {"insertTable": {"location": {"index": 5}, "rows": 2, "columns": 3}}
        with pytest.raises(ValidationError):
            docs_requests.insert_table(0, 3, 5)

    @pytest.mark.parametrize("url", ["ftp://host/x.png", "not a url", "https://", ""])
    def test_should_reject_invalid_image_url(self, url: str) -> None:
        """Verify only absolute http(s) URLs are accepted."""
        with pytest.raises(ValidationError, match="Invalid image URL format"):
            docs_requests.insert_inline_image(url, 1)

    def test_should_size_image_only_with_both_dimensions(self) -> None:
        """Verify objectSize needs width and height."""
        url = "https://example.com/a.png"

        sized = docs_requests.insert_inline_image(url, 1, width=100, height=50)
        unsized = docs_requests.insert_inline_image(url, 1, width=100)

        assert sized["insertInlineImage"]["objectSize"]["width"] == {"magnitude": 100, "unit": "PT"}
        assert "objectSize" not in unsized["insertInlineImage"]

    @pytest.mark.parametrize(
        ("chip_type", "value", "embedded"),
        [
            (
                "person",
                {"person_email": "ada@example.com"},
                {"personProperties": {"email": "ada@example.com"}},
            ),
            ("date", {"date": "2024-03-15"}, {"dateProperties": {"dateString": "2024-03-15"}}),
            (
                "file",
                {"file_id": "abc123"},
                {"richLinkProperties": {"uri": "https://drive.google.com/file/d/abc123/view"}},
            ),
        ],
    )
    def test_should_build_smart_chip(self, chip_type: str, value: dict, embedded: dict) -> None:
        """Verify each chip type becomes an inline object at the offset."""
        request = docs_requests.insert_smart_chip(chip_type, 7, tab_id="t.1", **value)

        assert request == {
            "insertInlineObject": {
                "location": {"index": 7, "tabId": "t.1"},
                "inlineObject": {"embeddedObject": embedded},
            }
        }

    def test_should_reject_incomplete_smart_chip(self) -> None:
        """Verify unknown types, missing values and bad offsets fail locally."""
        with pytest.raises(ValidationError, match="Unknown chip type"):
            docs_requests.insert_smart_chip("place", 1)
        with pytest.raises(ValidationError, match="person_email is required"):
            docs_requests.insert_smart_chip("person", 1)
        with pytest.raises(ValidationError, match="file_id is required"):
            docs_requests.insert_smart_chip("file", 1, date="2024-03-15")
        with pytest.raises(ValidationError):
            docs_requests.insert_smart_chip("date", 0, date="2024-03-15")

    def test_should_build_create_tab(self) -> None:
        """Verify optional tab properties are only sent when given."""
        expected = {"createTab": {"tabProperties": {"title": "Notes"}}}
        assert docs_requests.create_tab("Notes") == expected
        nested = docs_requests.create_tab("Sub", icon_emoji="📝", parent_tab_id="t.1", index=0)
        assert nested["createTab"]["tabProperties"] == {
            "title": "Sub",
            "iconEmoji": "📝",
            "parentTabId": "t.1",
            "index": 0,
        }

    def test_should_mask_only_given_tab_properties(self) -> None:
        """Verify updateTabProperties lists exactly the properties passed."""
        request = docs_requests.update_tab_properties("t.1", title="Renamed", iconEmoji=None)

        assert request["updateTabProperties"] == {
            "tabId": "t.1",
            "tabProperties": {"title": "Renamed"},
            "fields": "title",
        }
        with pytest.raises(ValidationError):
            docs_requests.update_tab_properties("t.1", title=None)


@pytest.mark.unit
class TestPlans:
    """Tests for multi-instruction plans."""

    def test_should_replace_body_keeping_final_newline(self, doc_json) -> None:
        """Verify the deletion stops before the body's last offset."""
        body = Body.from_api({"content": doc_json.body("Old text")})

        plan = docs_requests.plan_body_replacement(body, "New")

        assert plan[0] == {"deleteContentRange": {"range": {"startIndex": 1, "endIndex": 9}}}
        assert plan[1] == {"insertText": {"location": {"index": 1}, "text": "New"}}
        style = plan[2]["updateParagraphStyle"]
        assert style["range"] == {"startIndex": 1, "endIndex": 4}
        assert style["paragraphStyle"] == {"namedStyleType": "NORMAL_TEXT"}
        assert style["fields"] == "namedStyleType"

    def test_should_skip_delete_for_empty_body(self, doc_json) -> None:
        """Verify an empty body (a lone newline) is not deleted."""
        body = Body.from_api({"content": doc_json.body("")})

        plan = docs_requests.plan_body_replacement(body, "Text", tab_id="t.2")

        assert [next(iter(request)) for request in plan] == ["insertText", "updateParagraphStyle"]
        assert plan[0]["insertText"]["location"]["tabId"] == "t.2"

    def test_should_plan_nothing_for_empty_content(self) -> None:
        """Verify empty initial content produces no instructions."""
        assert docs_requests.plan_initial_content("") == []

    def test_should_style_initial_content_by_offsets(self) -> None:
        """Verify the style range ends after the emoji's two offsets."""
        plan = docs_requests.plan_initial_content("😀 hi")

        assert plan[0] == {"insertText": {"location": {"index": 1}, "text": "😀 hi"}}
        assert plan[1]["updateParagraphStyle"]["range"] == {"startIndex": 1, "endIndex": 6}

    def _cell(self, doc_json, text: str):
        table = parse_structural_element(doc_json.table([[text]], 20))
        assert isinstance(table, Table)
        return table.cell(0, 0)

    def test_should_rewrite_cell_text_style_and_alignment(self, doc_json) -> None:
        """Verify cell offsets derive from the pre-edit cell and the new text."""
        cell = self._cell(doc_json, "old")  # cell [22, 27), text [23, 26)

        plan = docs_requests.plan_cell_rewrite(
            cell, text_content="fresh", text_style=TextStyle(bold=True), alignment="CENTER"
        )

        assert plan[0] == {"deleteContentRange": {"range": {"startIndex": 23, "endIndex": 26}}}
        assert plan[1] == {"insertText": {"location": {"index": 23}, "text": "fresh"}}
        assert plan[2]["updateTextStyle"]["range"] == {"startIndex": 23, "endIndex": 28}
        assert plan[3]["updateParagraphStyle"]["range"] == {"startIndex": 23, "endIndex": 29}
        assert plan[3]["updateParagraphStyle"]["paragraphStyle"] == {"alignment": "CENTER"}

    def test_should_size_cell_ranges_by_offsets(self, doc_json) -> None:
        """Verify new cell text with an emoji extends the style ranges by two."""
        cell = self._cell(doc_json, "old")  # text [23, 26)

        plan = docs_requests.plan_cell_rewrite(
            cell, text_content="😀!", text_style=TextStyle(bold=True), alignment="START"
        )

        assert plan[2]["updateTextStyle"]["range"] == {"startIndex": 23, "endIndex": 26}
        assert plan[3]["updateParagraphStyle"]["range"] == {"startIndex": 23, "endIndex": 27}

    def test_should_style_existing_cell_text(self, doc_json) -> None:
        """Verify styling without new text covers the current cell text."""
        cell = self._cell(doc_json, "keep")  # text [23, 27)

        plan = docs_requests.plan_cell_rewrite(cell, text_style=TextStyle(italic=True))

        assert len(plan) == 1
        assert plan[0]["updateTextStyle"]["range"] == {"startIndex": 23, "endIndex": 27}

    def test_should_clear_cell_and_still_align(self, doc_json) -> None:
        """Verify emptying a cell keeps a one-offset alignment range."""
        cell = self._cell(doc_json, "gone")

        plan = docs_requests.plan_cell_rewrite(cell, text_content="", alignment="END")

        assert [next(iter(request)) for request in plan] == [
            "deleteContentRange",
            "updateParagraphStyle",
        ]
        assert plan[1]["updateParagraphStyle"]["range"] == {"startIndex": 23, "endIndex": 24}

    def test_should_plan_nothing_without_changes(self, doc_json) -> None:
        """Verify no arguments means no instructions."""
        assert docs_requests.plan_cell_rewrite(self._cell(doc_json, "x")) == []
