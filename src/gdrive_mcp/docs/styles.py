"""Style-request builders for text and paragraph formatting.

The Docs API applies a style update to exactly the properties named in the
request's ``fields`` mask. A property present in the style object but
missing from the mask is ignored; a property named in the mask but missing
from the object is *reset*. The builders below therefore record each field
name in the same step that writes the attribute, so the two can never drift.
"""

import logging
import re
from typing import Any, Literal

from pydantic import BaseModel

from gdrive_mcp.docs.errors import ValidationError
from gdrive_mcp.docs.ranges import Range

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

Alignment = Literal["START", "CENTER", "END", "JUSTIFIED"]
NamedStyleType = Literal[
    "NORMAL_TEXT",
    "TITLE",
    "SUBTITLE",
    "HEADING_1",
    "HEADING_2",
    "HEADING_3",
    "HEADING_4",
    "HEADING_5",
    "HEADING_6",
]


class TextStyle(BaseModel):
    """Sparse character formatting; ``None`` means "leave unchanged"."""

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None
    font_size: float | None = None
    font_family: str | None = None
    foreground_color: str | None = None
    background_color: str | None = None
    link_url: str | None = None


class ParagraphStyle(BaseModel):
    """Sparse paragraph formatting; dimensions are in points."""

    alignment: Alignment | None = None
    indent_start: float | None = None
    indent_end: float | None = None
    space_above: float | None = None
    space_below: float | None = None
    named_style_type: NamedStyleType | None = None
    keep_with_next: bool | None = None


class StyleRequest(BaseModel):
    """A single update instruction plus the field names it touches."""

    request: dict[str, Any]
    fields: list[str]


def hex_to_rgb_color(hex_color: str | None) -> dict[str, float] | None:
    """Convert ``#RGB``, ``#RRGGBB`` or ``RRGGBB`` to a Docs ``RgbColor``.

    Returns:
        ``{"red", "green", "blue"}`` floats in ``[0, 1]``, or None if the
        string is not a valid hex color.
    """
    if not hex_color:
        return None
    match = _HEX_COLOR.fullmatch(hex_color)
    if not match:
        return None

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)

    value = int(digits, 16)
    return {
        "red": ((value >> 16) & 0xFF) / 255,
        "green": ((value >> 8) & 0xFF) / 255,
        "blue": (value & 0xFF) / 255,
    }


def rgb_color_to_hex(optional_color: dict[str, Any] | None) -> str | None:
    """Convert a Docs ``OptionalColor`` (``{"color": {"rgbColor": ...}}``) to ``#rrggbb``."""
    rgb = ((optional_color or {}).get("color") or {}).get("rgbColor")
    if rgb is None:
        return None
    red = round(rgb.get("red", 0) * 255)
    green = round(rgb.get("green", 0) * 255)
    blue = round(rgb.get("blue", 0) * 255)
    return f"#{red:02x}{green:02x}{blue:02x}"


def _dimension(points: float) -> dict[str, Any]:
    return {"magnitude": points, "unit": "PT"}


class _FieldMaskBuilder:
    """Accumulates a sparse style object and its field mask together."""

    def __init__(self) -> None:
        self.style: dict[str, Any] = {}
        self.fields: list[str] = []

    def set(self, field: str, value: Any) -> None:
        self.style[field] = value
        self.fields.append(field)

    @property
    def mask(self) -> str:
        return ",".join(self.fields)


def _color(field_label: str, value: str) -> dict[str, Any]:
    rgb = hex_to_rgb_color(value)
    if rgb is None:
        raise ValidationError(f"Invalid {field_label} hex color: {value}", color=value)
    return {"color": {"rgbColor": rgb}}


def validate_colors(style: TextStyle) -> None:
    """Raise ValidationError for any color on ``style`` that is not valid hex."""
    if style.foreground_color is not None:
        _color("foreground", style.foreground_color)
    if style.background_color is not None:
        _color("background", style.background_color)


def build_text_style_request(range_: Range, style: TextStyle) -> StyleRequest | None:
    """Build an ``updateTextStyle`` instruction for the attributes set on ``style``.

    Args:
        range_: Target text range.
        style: Sparse text style.

    Returns:
        The instruction and its field names, or None if nothing is set.

    Raises:
        ValidationError: If a color is not a valid hex string.
    """
    builder = _FieldMaskBuilder()

    if style.bold is not None:
        builder.set("bold", style.bold)
    if style.italic is not None:
        builder.set("italic", style.italic)
    if style.underline is not None:
        builder.set("underline", style.underline)
    if style.strikethrough is not None:
        builder.set("strikethrough", style.strikethrough)
    if style.font_size is not None:
        builder.set("fontSize", _dimension(style.font_size))
    if style.font_family is not None:
        builder.set("weightedFontFamily", {"fontFamily": style.font_family})
    if style.foreground_color is not None:
        builder.set("foregroundColor", _color("foreground", style.foreground_color))
    if style.background_color is not None:
        builder.set("backgroundColor", _color("background", style.background_color))
    if style.link_url is not None:
        builder.set("link", {"url": style.link_url})

    if not builder.fields:
        return None

    request = {
        "updateTextStyle": {
            "range": range_.to_api(),
            "textStyle": builder.style,
            "fields": builder.mask,
        }
    }
    return StyleRequest(request=request, fields=builder.fields)


def build_paragraph_style_request(range_: Range, style: ParagraphStyle) -> StyleRequest | None:
    """Build an ``updateParagraphStyle`` instruction, or None if nothing is set."""
    builder = _FieldMaskBuilder()

    if style.alignment is not None:
        builder.set("alignment", style.alignment)
    if style.indent_start is not None:
        builder.set("indentStart", _dimension(style.indent_start))
    if style.indent_end is not None:
        builder.set("indentEnd", _dimension(style.indent_end))
    if style.space_above is not None:
        builder.set("spaceAbove", _dimension(style.space_above))
    if style.space_below is not None:
        builder.set("spaceBelow", _dimension(style.space_below))
    if style.named_style_type is not None:
        builder.set("namedStyleType", style.named_style_type)
    if style.keep_with_next is not None:
        builder.set("keepWithNext", style.keep_with_next)

    if not builder.fields:
        return None

    logger.debug(f"Paragraph style fields: {builder.mask}")
    request = {
        "updateParagraphStyle": {
            "range": range_.to_api(),
            "paragraphStyle": builder.style,
            "fields": builder.mask,
        }
    }
    return StyleRequest(request=request, fields=builder.fields)
