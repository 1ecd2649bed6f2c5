"""Offset model for Google Docs content.

A document tab is addressed as a linear sequence of character offsets
assigned by the Docs API. Structural elements and text runs occupy
half-open ``[start_index, end_index)`` ranges.

Offsets count UTF-16 code units, not Python characters: a character outside
the Basic Multilingual Plane (most emoji) occupies two offsets. Use
``utf16_len`` for any length that is added to an offset and
``utf16_to_index`` to turn an offset within a run back into a string index.

A Range is only meaningful against the document snapshot it was derived
from: any insertion or deletion makes every offset after the edit point
stale, so ranges must never be carried across a batch update.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from gdrive_mcp.docs.errors import ValidationError

# Index 0 holds the implicit section break; body text starts at 1.
MIN_BODY_INDEX = 1


def utf16_len(text: str) -> int:
    """Length of ``text`` in UTF-16 code units."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def utf16_to_index(text: str, units: int) -> int:
    """Return the string index reached after ``units`` UTF-16 code units of ``text``.

    A count that lands inside a surrogate pair rounds up to the next character.
    """
    if units <= 0:
        return 0

    counted = 0
    for index, char in enumerate(text):
        if counted >= units:
            return index
        counted += 2 if ord(char) >= 0x10000 else 1
    return len(text)


class Range(BaseModel):
    """Half-open offset range ``[start_index, end_index)`` within one tab.

    Attributes:
        start_index: First offset covered by the range.
        end_index: First offset after the range (exclusive).
        tab_id: Tab the offsets belong to; None means the first tab.
    """

    model_config = {"frozen": True}

    start_index: int = Field(..., description="Inclusive start offset")
    end_index: int = Field(..., description="Exclusive end offset")
    tab_id: str | None = Field(default=None, description="Tab the offsets refer to")

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.end_index <= self.start_index:
            raise ValueError(
                f"end_index ({self.end_index}) must be greater than "
                f"start_index ({self.start_index})"
            )
        return self

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    def contains(self, offset: int) -> bool:
        """Return True if ``start_index <= offset < end_index``."""
        return self.start_index <= offset < self.end_index

    def overlaps(self, other: "Range") -> bool:
        return self.start_index < other.end_index and other.start_index < self.end_index

    def is_adjacent(self, other: "Range") -> bool:
        """Return True if the two ranges touch without overlapping."""
        return self.end_index == other.start_index or other.end_index == self.start_index

    def to_api(self) -> dict[str, Any]:
        """Serialize to the Docs API ``Range`` object."""
        api_range: dict[str, Any] = {
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }
        if self.tab_id:
            api_range["tabId"] = self.tab_id
        return api_range


class Segment(BaseModel):
    """Flat-text view of one text run, keeping its real offsets."""

    model_config = {"frozen": True}

    text: str
    start: int
    end: int


def validate_range(start_index: int, end_index: int, tab_id: str | None = None) -> Range:
    """Build a Range from caller-supplied offsets, rejecting bad input.

    Args:
        start_index: Requested start offset (must be >= 1).
        end_index: Requested end offset (must be > start_index).
        tab_id: Optional tab the offsets refer to.

    Returns:
        The validated Range.

    Raises:
        ValidationError: If the range is empty, inverted, or before the body start.
    """
    if start_index < MIN_BODY_INDEX:
        raise ValidationError(
            f"start_index must be at least {MIN_BODY_INDEX}",
            start_index=start_index,
            end_index=end_index,
        )
    if end_index <= start_index:
        raise ValidationError(
            "end_index must be greater than start_index",
            start_index=start_index,
            end_index=end_index,
        )
    return Range(start_index=start_index, end_index=end_index, tab_id=tab_id)


def validate_index(index: int) -> int:
    """Reject insertion points before the start of the body."""
    if index < MIN_BODY_INDEX:
        raise ValidationError(f"index must be at least {MIN_BODY_INDEX} (1-based)", index=index)
    return index
