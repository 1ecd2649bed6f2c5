"""Locate text inside a document body by content and instance number.

The body is flattened into segments (one per text run, tables visited
row-major) whose texts concatenate into a single search string. Matches in
that string are translated back to real document offsets through the
segments, so a match may span runs that differ only in formatting.
"""

import logging

from gdrive_mcp.docs.errors import ValidationError
from gdrive_mcp.docs.models import (
    Body,
    OpaqueElement,
    Paragraph,
    SectionBreak,
    StructuralElement,
    Table,
    TextRun,
)
from gdrive_mcp.docs.ranges import Range, Segment, utf16_len

logger = logging.getLogger(__name__)


def collect_segments(content: list[StructuralElement]) -> list[Segment]:
    """Flatten structural elements into text segments in document order.

    Table cells are visited row by row, recursing into nested tables.
    Runs without offsets (partial field masks) are skipped.

    Args:
        content: Structural elements of a body or table cell.

    Returns:
        Segments ordered by start offset.
    """
    segments: list[Segment] = []

    def walk(elements: list[StructuralElement]) -> None:
        for element in elements:
            if isinstance(element, Paragraph):
                for run in element.elements:
                    if not isinstance(run, TextRun) or not run.content:
                        continue
                    if run.start_index is None or run.end_index is None:
                        continue
                    segments.append(
                        Segment(text=run.content, start=run.start_index, end=run.end_index)
                    )
            elif isinstance(element, Table):
                for row in element.rows:
                    for cell in row.cells:
                        walk(cell.content)
            elif isinstance(element, (SectionBreak, OpaqueElement)):
                continue

    walk(content)
    segments.sort(key=lambda segment: segment.start)
    return segments


def _flat_span_to_range(
    segments: list[Segment], flat_start: int, flat_end: int, tab_id: str | None
) -> Range | None:
    """Map a ``[flat_start, flat_end)`` span of the joined text to offsets.

    Flat positions are string indexes; the distance into a segment is
    converted to UTF-16 units before it is added to the segment's offset.
    """
    start_index: int | None = None
    position = 0

    for segment in segments:
        segment_flat_start = position
        segment_flat_end = position + len(segment.text)

        if start_index is None and segment_flat_start <= flat_start < segment_flat_end:
            start_index = segment.start + utf16_len(
                segment.text[: flat_start - segment_flat_start]
            )

        if segment_flat_start < flat_end <= segment_flat_end:
            end_index = segment.start + utf16_len(segment.text[: flat_end - segment_flat_start])
            if start_index is None or end_index <= start_index:
                return None
            return Range(start_index=start_index, end_index=end_index, tab_id=tab_id)

        position = segment_flat_end

    return None


def locate_text(
    body: Body,
    text_to_find: str,
    instance: int = 1,
    tab_id: str | None = None,
) -> Range | None:
    """Find the Nth occurrence of a string and return its offset range.

    Matching is exact and case-sensitive. Each search resumes at the end of
    the previous match, so occurrences never overlap.

    Args:
        body: Body of the tab to search.
        text_to_find: Literal text to look for.
        instance: 1-based occurrence to return.
        tab_id: Tab the body belongs to, recorded on the returned range.

    Returns:
        Range of the requested occurrence, or None if the text occurs fewer
        than ``instance`` times. The range is only valid for this snapshot.

    Raises:
        ValidationError: If ``instance`` is below 1 or the text is empty.
    """
    if instance < 1:
        raise ValidationError("match_instance must be at least 1", instance=instance)
    if not text_to_find:
        raise ValidationError("text_to_find must not be empty")

    segments = collect_segments(body.content)
    full_text = "".join(segment.text for segment in segments)

    found = 0
    search_from = 0
    while found < instance:
        position = full_text.find(text_to_find, search_from)
        if position == -1:
            logger.debug(
                f'"{text_to_find}" found {found} time(s), instance {instance} requested'
            )
            return None

        found += 1
        if found == instance:
            return _flat_span_to_range(
                segments, position, position + len(text_to_find), tab_id
            )
        search_from = position + len(text_to_find)

    return None
