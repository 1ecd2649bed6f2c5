"""Read-side views of a document body: plain text, counts, indexed listings."""

import re
from typing import Any

from pydantic import BaseModel, Field

from gdrive_mcp.docs.locator import collect_segments
from gdrive_mcp.docs.models import (
    InlineElement,
    OpaqueElement,
    Paragraph,
    SectionBreak,
    StructuralElement,
    Table,
    TextRun,
)
from gdrive_mcp.docs.ranges import Range, utf16_len, utf16_to_index
from gdrive_mcp.docs.styles import rgb_color_to_hex

TRUNCATION_MARKER = "\n... (truncated)"


def extract_text(content: list[StructuralElement]) -> str:
    """Concatenate the text of a body.

    Table cells are rendered row by row: each cell's text is followed by a
    tab and each row by a newline. Nested tables recurse.
    """
    parts: list[str] = []
    for element in content:
        if isinstance(element, Paragraph):
            parts.append(element.text)
        elif isinstance(element, Table):
            for row in element.rows:
                for cell in row.cells:
                    parts.append(extract_text(cell.content))
                    parts.append("\t")
                parts.append("\n")
        elif isinstance(element, (SectionBreak, OpaqueElement)):
            continue
    return "".join(parts)


def extract_paragraph_text(content: list[StructuralElement]) -> str:
    """Concatenate top-level paragraph text only (tables are skipped)."""
    return "".join(element.text for element in content if isinstance(element, Paragraph))


def count_occurrences(text: str, find_text: str, match_case: bool = False) -> int:
    """Count non-overlapping literal occurrences of ``find_text`` in ``text``."""
    if not find_text:
        return 0
    flags = 0 if match_case else re.IGNORECASE
    return len(re.findall(re.escape(find_text), text, flags))


def character_count(content: list[StructuralElement]) -> int:
    """Offsets occupied by text runs (UTF-16 units), table cells included."""
    return sum(utf16_len(segment.text) for segment in collect_segments(content))


def slice_text(content: list[StructuralElement], range_: Range) -> str:
    """Return the text covered by ``range_``, stitched across runs."""
    parts: list[str] = []
    for segment in collect_segments(content):
        if segment.end <= range_.start_index or segment.start >= range_.end_index:
            continue
        begin = utf16_to_index(segment.text, range_.start_index - segment.start)
        end = utf16_to_index(segment.text, range_.end_index - segment.start)
        parts.append(segment.text[begin:end])
    return "".join(parts)


def truncate(text: str, max_length: int | None) -> str:
    if max_length and len(text) > max_length:
        return text[:max_length] + TRUNCATION_MARKER
    return text


# =============================================================================
# Indexed listing
# =============================================================================


class StyledSegment(BaseModel):
    """A text run with its offsets and the formatting worth reporting."""

    text: str
    start: int
    end: int
    font_family: str | None = None
    font_size: float | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    foreground_color: str | None = None
    background_color: str | None = None

    @property
    def style_names(self) -> list[str]:
        names = ("bold", "italic", "underline", "strikethrough")
        return [name for name in names if getattr(self, name)]

    @property
    def has_formatting(self) -> bool:
        return bool(
            self.font_family
            or self.font_size
            or self.style_names
            or self.foreground_color
            or self.background_color
        )

    def meta_line(self) -> str:
        parts = []
        if self.font_family:
            parts.append(f'font="{self.font_family}"')
        if self.font_size:
            parts.append(f"size={self.font_size:g}pt")
        if self.style_names:
            parts.append(f"style={','.join(self.style_names)}")
        if self.foreground_color:
            parts.append(f"color={self.foreground_color}")
        if self.background_color:
            parts.append(f"bg={self.background_color}")
        return ", ".join(parts)


class FontUsage(BaseModel):
    """Aggregate use of one font family across a document."""

    font_family: str
    sizes: set[float] = Field(default_factory=set)
    styles: set[str] = Field(default_factory=set)
    char_count: int = 0

    def describe(self) -> str:
        sizes = (
            ", ".join(f"{size:g}" for size in sorted(self.sizes)) + " pt"
            if self.sizes
            else "default size"
        )
        styles = ", ".join(sorted(self.styles)) if self.styles else "normal"
        return f"{self.font_family}: sizes [{sizes}], styles [{styles}], ~{self.char_count} chars"


def _styled_segment(run: TextRun) -> StyledSegment:
    style = run.text_style
    return StyledSegment(
        text=run.content,
        start=run.start_index,
        end=run.end_index,
        font_family=(style.get("weightedFontFamily") or {}).get("fontFamily"),
        font_size=(style.get("fontSize") or {}).get("magnitude"),
        bold=bool(style.get("bold")),
        italic=bool(style.get("italic")),
        underline=bool(style.get("underline")),
        strikethrough=bool(style.get("strikethrough")),
        foreground_color=rgb_color_to_hex(style.get("foregroundColor")),
        background_color=rgb_color_to_hex(style.get("backgroundColor")),
    )


def collect_styled_segments(content: list[StructuralElement]) -> list[StyledSegment]:
    """Like ``collect_segments`` but keeping each run's formatting."""
    segments: list[StyledSegment] = []
    for element in content:
        if isinstance(element, Paragraph):
            for run in element.text_runs:
                if run.content and run.start_index is not None and run.end_index is not None:
                    segments.append(_styled_segment(run))
        elif isinstance(element, Table):
            for row in element.rows:
                for cell in row.cells:
                    segments.extend(collect_styled_segments(cell.content))
    return segments


def format_indexed_text(segments: list[StyledSegment], with_formatting: bool = False) -> str:
    """Render ``[start-end] line`` entries, one per non-blank line of each run.

    With formatting, each entry gets a metadata header and the line is
    indented below it.
    """
    lines: list[str] = []
    for segment in segments:
        meta = segment.meta_line() if with_formatting and segment.has_formatting else None
        offset = segment.start
        for line in segment.text.split("\n"):
            if line.strip():
                span = f"[{offset}-{offset + utf16_len(line)}]"
                if meta:
                    lines.append(f"{span} {meta}\n  {line}")
                else:
                    lines.append(f"{span} {line}")
            offset += utf16_len(line) + 1
    return "".join(f"{line}\n" for line in lines)


def summarize_fonts(segments: list[StyledSegment]) -> list[FontUsage]:
    """Group runs by font family, most-used first."""
    usage: dict[str, FontUsage] = {}
    for segment in segments:
        if not segment.font_family:
            continue
        info = usage.setdefault(segment.font_family, FontUsage(font_family=segment.font_family))
        if segment.font_size:
            info.sizes.add(segment.font_size)
        info.styles.update(segment.style_names)
        info.char_count += segment.end - segment.start
    return sorted(usage.values(), key=lambda info: info.char_count, reverse=True)


# =============================================================================
# Smart chips
# =============================================================================


def collect_smart_chips(content: list[StructuralElement]) -> list[dict[str, Any]]:
    """List person and rich-link chips with their offsets, tables included."""
    chips: list[dict[str, Any]] = []
    for element in content:
        if isinstance(element, Paragraph):
            for item in element.elements:
                if not isinstance(item, InlineElement):
                    continue
                if item.kind == "person":
                    props = item.properties.get("personProperties", {})
                    chips.append(
                        {
                            "type": "person",
                            "email": props.get("email", "unknown"),
                            "name": props.get("name"),
                            "start_index": item.start_index,
                        }
                    )
                elif item.kind == "richLink":
                    props = item.properties.get("richLinkProperties", {})
                    chips.append(
                        {
                            "type": "richLink",
                            "uri": props.get("uri", "unknown"),
                            "title": props.get("title"),
                            "start_index": item.start_index,
                        }
                    )
        elif isinstance(element, Table):
            for row in element.rows:
                for cell in row.cells:
                    chips.extend(collect_smart_chips(cell.content))
    return chips
