"""Typed view of the Google Docs document tree.

The Docs API returns loosely-typed JSON. This module parses it once into a
tagged union of structural elements so traversal code can match on the
element type instead of probing optional keys:

    StructuralElement = Paragraph | Table | SectionBreak | OpaqueElement

Offsets are copied verbatim from the API response; nothing here computes
or adjusts them.
"""

from collections.abc import Iterator
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

# Paragraph elements that are not text runs but still occupy offsets
INLINE_ELEMENT_KINDS = (
    "inlineObjectElement",
    "person",
    "richLink",
    "dateElement",
    "footnoteReference",
    "horizontalRule",
    "pageBreak",
    "columnBreak",
    "equation",
    "autoText",
)


class TextRun(BaseModel):
    """A run of text sharing one style inside a paragraph."""

    content: str
    start_index: int | None = None
    end_index: int | None = None
    text_style: dict[str, Any] = Field(default_factory=dict)


class InlineElement(BaseModel):
    """Non-text paragraph element (smart chip, inline image, break...)."""

    kind: str
    start_index: int | None = None
    end_index: int | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


ParagraphElement = Union[TextRun, InlineElement]


class Paragraph(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    start_index: int = 0
    end_index: int = 0
    elements: list[ParagraphElement] = Field(default_factory=list)
    paragraph_style: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return "".join(e.content for e in self.elements if isinstance(e, TextRun))

    @property
    def text_runs(self) -> list[TextRun]:
        return [e for e in self.elements if isinstance(e, TextRun)]


class TableCell(BaseModel):
    start_index: int = 0
    end_index: int = 0
    content: list["StructuralElement"] = Field(default_factory=list)


class TableRow(BaseModel):
    start_index: int = 0
    end_index: int = 0
    cells: list[TableCell] = Field(default_factory=list)


class Table(BaseModel):
    kind: Literal["table"] = "table"
    start_index: int = 0
    end_index: int = 0
    rows: list[TableRow] = Field(default_factory=list)
    columns: int = 0

    def cell(self, row_index: int, column_index: int) -> TableCell | None:
        """Return the cell at a zero-based position, or None if out of bounds."""
        if not 0 <= row_index < len(self.rows):
            return None
        cells = self.rows[row_index].cells
        if not 0 <= column_index < len(cells):
            return None
        return cells[column_index]


class SectionBreak(BaseModel):
    kind: Literal["sectionBreak"] = "sectionBreak"
    start_index: int = 0
    end_index: int = 0


class OpaqueElement(BaseModel):
    """Structural element the editing core never looks inside (e.g. TOC)."""

    kind: Literal["opaque"] = "opaque"
    api_kind: str = ""
    start_index: int = 0
    end_index: int = 0


StructuralElement = Union[Paragraph, Table, SectionBreak, OpaqueElement]

TableCell.model_rebuild()
TableRow.model_rebuild()
Table.model_rebuild()


# =============================================================================
# Parsing
# =============================================================================


def _parse_paragraph_element(raw: dict[str, Any]) -> ParagraphElement | None:
    start = raw.get("startIndex")
    end = raw.get("endIndex")

    if "textRun" in raw:
        text_run = raw["textRun"]
        return TextRun(
            content=text_run.get("content", ""),
            start_index=start,
            end_index=end,
            text_style=text_run.get("textStyle", {}),
        )

    for kind in INLINE_ELEMENT_KINDS:
        if kind in raw:
            return InlineElement(
                kind=kind, start_index=start, end_index=end, properties=raw[kind] or {}
            )

    return None


def parse_structural_element(raw: dict[str, Any]) -> StructuralElement:
    """Parse one entry of a body's ``content`` array."""
    start = raw.get("startIndex", 0)
    end = raw.get("endIndex", start)

    if "paragraph" in raw:
        paragraph = raw["paragraph"] or {}
        elements = []
        for raw_element in paragraph.get("elements", []):
            element = _parse_paragraph_element(raw_element)
            if element is not None:
                elements.append(element)
        return Paragraph(
            start_index=start,
            end_index=end,
            elements=elements,
            paragraph_style=paragraph.get("paragraphStyle", {}),
        )

    if "table" in raw:
        table = raw["table"] or {}
        rows = []
        for raw_row in table.get("tableRows", []):
            cells = [
                TableCell(
                    start_index=raw_cell.get("startIndex", 0),
                    end_index=raw_cell.get("endIndex", 0),
                    content=parse_content(raw_cell.get("content", [])),
                )
                for raw_cell in raw_row.get("tableCells", [])
            ]
            rows.append(
                TableRow(
                    start_index=raw_row.get("startIndex", 0),
                    end_index=raw_row.get("endIndex", 0),
                    cells=cells,
                )
            )
        return Table(
            start_index=start,
            end_index=end,
            rows=rows,
            columns=table.get("columns", 0),
        )

    if "sectionBreak" in raw:
        return SectionBreak(start_index=start, end_index=end)

    api_kind = next((key for key in raw if key not in ("startIndex", "endIndex")), "")
    return OpaqueElement(api_kind=api_kind, start_index=start, end_index=end)


def parse_content(raw_content: list[dict[str, Any]] | None) -> list[StructuralElement]:
    return [parse_structural_element(raw) for raw in raw_content or []]


class Body(BaseModel):
    """Ordered structural elements of one tab (or a legacy single-tab document)."""

    content: list[StructuralElement] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: dict[str, Any] | None) -> "Body":
        return cls(content=parse_content((raw or {}).get("content")))

    @property
    def end_index(self) -> int:
        """End offset of the last element (1 for an empty body)."""
        if not self.content:
            return 1
        return self.content[-1].end_index


class Tab(BaseModel):
    """One tab of a document, with its nested child tabs."""

    tab_id: str | None = None
    title: str = ""
    index: int = 0
    nesting_level: int = 0
    parent_tab_id: str | None = None
    icon_emoji: str | None = None
    body: Body = Field(default_factory=Body)
    child_tabs: list["Tab"] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Tab":
        props = raw.get("tabProperties", {})
        return cls(
            tab_id=props.get("tabId"),
            title=props.get("title", ""),
            index=props.get("index", 0),
            nesting_level=props.get("nestingLevel", 0),
            parent_tab_id=props.get("parentTabId"),
            icon_emoji=props.get("iconEmoji"),
            body=Body.from_api(raw.get("documentTab", {}).get("body")),
            child_tabs=[cls.from_api(child) for child in raw.get("childTabs", [])],
        )


class Document(BaseModel):
    """A fetched document snapshot."""

    document_id: str | None = None
    title: str = ""
    revision_id: str | None = None
    body: Body = Field(default_factory=Body)
    tabs: list[Tab] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Document":
        return cls(
            document_id=raw.get("documentId"),
            title=raw.get("title", ""),
            revision_id=raw.get("revisionId"),
            body=Body.from_api(raw.get("body")),
            tabs=[Tab.from_api(tab) for tab in raw.get("tabs", [])],
        )

    def iter_tabs(self) -> Iterator[Tab]:
        """Yield every tab depth-first, parents before their children."""

        def walk(tabs: list[Tab]) -> Iterator[Tab]:
            for tab in tabs:
                yield tab
                yield from walk(tab.child_tabs)

        yield from walk(self.tabs)

    def find_tab(self, tab_id: str) -> Tab | None:
        for tab in self.iter_tabs():
            if tab.tab_id == tab_id:
                return tab
        return None

    def body_for(self, tab_id: str | None = None) -> Body | None:
        """Return the body to address.

        Without a tab ID this is the first tab's body, falling back to the
        legacy ``body`` field when the document was fetched without tabs.
        Returns None when the requested tab does not exist.
        """
        if tab_id is None:
            return self.tabs[0].body if self.tabs else self.body
        tab = self.find_tab(tab_id)
        return tab.body if tab else None


# =============================================================================
# Structural invariants
# =============================================================================


def nesting_violations(
    content: list[StructuralElement],
    parent: tuple[int, int] | None = None,
    path: str = "body",
) -> list[str]:
    """Check that offsets nest inside their parents and siblings never overlap.

    Args:
        content: Structural elements to check.
        parent: ``(start, end)`` of the enclosing element, if any.
        path: Label used in violation messages.

    Returns:
        Human-readable descriptions of every violation found (empty when valid).
    """
    violations: list[str] = []
    previous_end: int | None = None

    for position, element in enumerate(content):
        label = f"{path}[{position}]"
        start, end = element.start_index, element.end_index

        if end < start:
            violations.append(f"{label}: end {end} before start {start}")
        if parent is not None and not (parent[0] <= start and end <= parent[1]):
            violations.append(
                f"{label}: [{start},{end}) outside parent [{parent[0]},{parent[1]})"
            )
        if previous_end is not None and start < previous_end:
            violations.append(
                f"{label}: starts at {start}, overlapping previous sibling ending at {previous_end}"
            )
        previous_end = end

        if isinstance(element, Paragraph):
            run_end: int | None = None
            for run_position, run in enumerate(element.elements):
                if run.start_index is None or run.end_index is None:
                    continue
                run_label = f"{label}.elements[{run_position}]"
                if not (start <= run.start_index and run.end_index <= end):
                    violations.append(f"{run_label}: outside paragraph [{start},{end})")
                if run_end is not None and run.start_index < run_end:
                    violations.append(f"{run_label}: overlaps previous element")
                run_end = run.end_index
        elif isinstance(element, Table):
            for row_position, row in enumerate(element.rows):
                for cell_position, cell in enumerate(row.cells):
                    cell_label = f"{label}.rows[{row_position}].cells[{cell_position}]"
                    if not (start <= cell.start_index and cell.end_index <= end):
                        violations.append(f"{cell_label}: outside table [{start},{end})")
                    violations.extend(
                        nesting_violations(
                            cell.content, (cell.start_index, cell.end_index), cell_label
                        )
                    )

    return violations
