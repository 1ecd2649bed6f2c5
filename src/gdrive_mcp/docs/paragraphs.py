"""Resolve paragraph and table boundaries from offsets."""

from gdrive_mcp.docs.models import (
    Body,
    OpaqueElement,
    Paragraph,
    SectionBreak,
    StructuralElement,
    Table,
)
from gdrive_mcp.docs.ranges import Range


def _find_paragraph(content: list[StructuralElement], offset: int) -> Paragraph | None:
    for element in content:
        if not element.start_index <= offset < element.end_index:
            continue
        if isinstance(element, Paragraph):
            return element
        if isinstance(element, Table):
            for row in element.rows:
                for cell in row.cells:
                    found = _find_paragraph(cell.content, offset)
                    if found is not None:
                        return found
        elif isinstance(element, (SectionBreak, OpaqueElement)):
            continue
    return None


def resolve_paragraph(body: Body, offset: int, tab_id: str | None = None) -> Range | None:
    """Return the range of the paragraph containing ``offset``.

    Descends into table cells when the offset falls inside a table. Offsets
    nest, so at most one paragraph contains any offset.

    Args:
        body: Body of the tab to search.
        offset: Any offset inside the wanted paragraph.
        tab_id: Tab the body belongs to, recorded on the returned range.

    Returns:
        The paragraph's range, or None if no paragraph contains the offset.
    """
    paragraph = _find_paragraph(body.content, offset)
    if paragraph is None or paragraph.end_index <= paragraph.start_index:
        return None
    return Range(start_index=paragraph.start_index, end_index=paragraph.end_index, tab_id=tab_id)


def find_table(body: Body, start_index: int) -> Table | None:
    """Return the table (possibly nested in a cell) starting at ``start_index``."""

    def walk(content: list[StructuralElement]) -> Table | None:
        for element in content:
            if not isinstance(element, Table):
                continue
            if element.start_index == start_index:
                return element
            if element.start_index < start_index < element.end_index:
                for row in element.rows:
                    for cell in row.cells:
                        nested = walk(cell.content)
                        if nested is not None:
                            return nested
        return None

    return walk(body.content)
