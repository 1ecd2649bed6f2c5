"""Pure builders for Google Docs ``batchUpdate`` instructions.

Every function returns plain dictionaries ready to go into the ``requests``
array of a batch update. Multi-instruction plans compute all offsets from a
single pre-batch snapshot plus the known lengths of earlier instructions in
the same plan; the service applies the array in order.
"""

from typing import Any
from urllib.parse import urlparse

from gdrive_mcp.docs.errors import ValidationError
from gdrive_mcp.docs.models import Body, TableCell
from gdrive_mcp.docs.ranges import MIN_BODY_INDEX, Range, utf16_len, validate_index
from gdrive_mcp.docs.styles import (
    ParagraphStyle,
    TextStyle,
    build_paragraph_style_request,
    build_text_style_request,
)


def location(index: int, tab_id: str | None = None) -> dict[str, Any]:
    """Build a Docs ``Location`` object."""
    loc: dict[str, Any] = {"index": index}
    if tab_id:
        loc["tabId"] = tab_id
    return loc


def insert_text(text: str, index: int, tab_id: str | None = None) -> dict[str, Any]:
    validate_index(index)
    return {"insertText": {"location": location(index, tab_id), "text": text}}


def delete_content_range(range_: Range) -> dict[str, Any]:
    return {"deleteContentRange": {"range": range_.to_api()}}


def replace_all_text(find_text: str, replace_text: str, match_case: bool = False) -> dict[str, Any]:
    if not find_text:
        raise ValidationError("find_text must not be empty")
    return {
        "replaceAllText": {
            "containsText": {"text": find_text, "matchCase": match_case},
            "replaceText": replace_text,
        }
    }


def insert_table(rows: int, columns: int, index: int, tab_id: str | None = None) -> dict[str, Any]:
    if rows < 1 or columns < 1:
        raise ValidationError(
            "Tables need at least one row and one column", rows=rows, columns=columns
        )
    validate_index(index)
    return {
        "insertTable": {
            "location": location(index, tab_id),
            "rows": rows,
            "columns": columns,
        }
    }


def validate_image_url(image_url: str) -> str:
    """Reject anything that is not an absolute http(s) URL."""
    parsed = urlparse(image_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid image URL format: {image_url}", image_url=image_url)
    return image_url


def insert_inline_image(
    image_url: str,
    index: int,
    width: float | None = None,
    height: float | None = None,
    tab_id: str | None = None,
) -> dict[str, Any]:
    """Build an ``insertInlineImage`` instruction.

    The object size is only sent when both width and height are given, in
    points; otherwise the service uses the image's natural size.
    """
    validate_image_url(image_url)
    validate_index(index)

    request: dict[str, Any] = {"location": location(index, tab_id), "uri": image_url}
    if width and height:
        request["objectSize"] = {
            "height": {"magnitude": height, "unit": "PT"},
            "width": {"magnitude": width, "unit": "PT"},
        }
    return {"insertInlineImage": request}


SMART_CHIP_TYPES = ("person", "date", "file")


def insert_smart_chip(
    chip_type: str,
    index: int,
    person_email: str | None = None,
    date: str | None = None,
    file_id: str | None = None,
    tab_id: str | None = None,
) -> dict[str, Any]:
    """Build an ``insertInlineObject`` instruction for a person, date or file chip.

    Each chip type needs its own value: an email for ``person``, a date string
    for ``date`` and a Drive file ID for ``file``.
    """
    validate_index(index)

    if chip_type == "person":
        if not person_email:
            raise ValidationError("person_email is required for person chips")
        chip: dict[str, Any] = {"personProperties": {"email": person_email}}
    elif chip_type == "date":
        if not date:
            raise ValidationError("date is required for date chips")
        chip = {"dateProperties": {"dateString": date}}
    elif chip_type == "file":
        if not file_id:
            raise ValidationError("file_id is required for file chips")
        chip = {"richLinkProperties": {"uri": f"https://drive.google.com/file/d/{file_id}/view"}}
    else:
        raise ValidationError(
            f"Unknown chip type: {chip_type}", chip_type=chip_type, allowed=list(SMART_CHIP_TYPES)
        )

    return {
        "insertInlineObject": {
            "location": location(index, tab_id),
            "inlineObject": {"embeddedObject": chip},
        }
    }


def create_tab(
    title: str,
    icon_emoji: str | None = None,
    parent_tab_id: str | None = None,
    index: int | None = None,
) -> dict[str, Any]:
    tab_properties: dict[str, Any] = {"title": title}
    if icon_emoji:
        tab_properties["iconEmoji"] = icon_emoji
    if parent_tab_id:
        tab_properties["parentTabId"] = parent_tab_id
    if index is not None:
        tab_properties["index"] = index
    return {"createTab": {"tabProperties": tab_properties}}


def update_tab_properties(tab_id: str, **properties: Any) -> dict[str, Any]:
    """Build an ``updateTabProperties`` instruction for the given properties.

    Keyword arguments use API names (``title``, ``iconEmoji``...); the field
    mask lists exactly the properties passed.
    """
    fields = [name for name, value in properties.items() if value is not None]
    if not fields:
        raise ValidationError("No tab properties to update", tab_id=tab_id)
    return {
        "updateTabProperties": {
            "tabId": tab_id,
            "tabProperties": {name: properties[name] for name in fields},
            "fields": ",".join(fields),
        }
    }


# =============================================================================
# Multi-instruction plans
# =============================================================================


def plan_body_replacement(
    body: Body, content: str, tab_id: str | None = None
) -> list[dict[str, Any]]:
    """Replace the whole body with ``content`` formatted as normal text.

    The final newline of a body can never be deleted, so the deletion stops
    one offset short of the body end. Both the insertion and the style range
    start at the first body offset, which the deletion leaves in place.
    """
    requests: list[dict[str, Any]] = []

    delete_end = max(MIN_BODY_INDEX, body.end_index - 1)
    if delete_end > MIN_BODY_INDEX:
        requests.append(
            delete_content_range(
                Range(start_index=MIN_BODY_INDEX, end_index=delete_end, tab_id=tab_id)
            )
        )

    requests.extend(plan_initial_content(content, tab_id))
    return requests


def plan_initial_content(content: str, tab_id: str | None = None) -> list[dict[str, Any]]:
    """Insert ``content`` at the start of an empty body as ``NORMAL_TEXT``."""
    if not content:
        return []

    style_range = Range(
        start_index=MIN_BODY_INDEX, end_index=MIN_BODY_INDEX + utf16_len(content), tab_id=tab_id
    )
    style = build_paragraph_style_request(
        style_range, ParagraphStyle(named_style_type="NORMAL_TEXT")
    )
    return [insert_text(content, MIN_BODY_INDEX, tab_id), style.request]


def plan_cell_rewrite(
    cell: TableCell,
    text_content: str | None = None,
    text_style: TextStyle | None = None,
    alignment: str | None = None,
    tab_id: str | None = None,
) -> list[dict[str, Any]]:
    """Rewrite, restyle and/or realign one table cell in a single batch.

    A cell's offsets are ``[cell.start, cell.end)``; its editable text sits in
    ``[cell.start + 1, cell.end - 1)`` because the first offset opens the
    cell and the last one is the trailing paragraph mark. Every offset below
    derives from the pre-edit cell plus the UTF-16 length of ``text_content``.

    Returns:
        The ordered instructions (possibly empty when nothing was requested).
    """
    content_start = cell.start_index + 1
    content_end = cell.end_index - 1
    requests: list[dict[str, Any]] = []

    if text_content is not None:
        if content_end > content_start:
            requests.append(
                delete_content_range(
                    Range(start_index=content_start, end_index=content_end, tab_id=tab_id)
                )
            )
        if text_content:
            requests.append(insert_text(text_content, content_start, tab_id))

    inserted_length = utf16_len(text_content) if text_content is not None else 0

    if text_style is not None:
        style_end = content_start + inserted_length if text_content is not None else content_end
        if style_end > content_start:
            style = build_text_style_request(
                Range(start_index=content_start, end_index=style_end, tab_id=tab_id), text_style
            )
            if style is not None:
                requests.append(style.request)

    if alignment is not None:
        # Include the cell's paragraph mark so an emptied cell still has a range
        if text_content is not None:
            paragraph_end = content_start + inserted_length + 1
        else:
            paragraph_end = max(content_end, content_start + 1)
        style = build_paragraph_style_request(
            Range(start_index=content_start, end_index=paragraph_end, tab_id=tab_id),
            ParagraphStyle(alignment=alignment),
        )
        requests.append(style.request)

    return requests
