"""MCP tool definitions for the Google Docs server."""

from typing import Any

from mcp.types import Tool

_DOCUMENT_ID = {"type": "string", "description": "Google Doc ID"}
_TAB_ID = {
    "type": "string",
    "description": "Tab ID to target (optional). Defaults to the first tab.",
}
_START_INDEX = {
    "type": "integer",
    "minimum": 1,
    "description": "Start offset (inclusive, 1-based). Use get_google_doc_content to find offsets.",
}
_END_INDEX = {"type": "integer", "minimum": 1, "description": "End offset (exclusive)"}
_TEXT_TO_FIND = {
    "type": "string",
    "description": "Exact, case-sensitive text to target instead of explicit offsets",
}
_MATCH_INSTANCE = {
    "type": "integer",
    "minimum": 1,
    "default": 1,
    "description": "Which occurrence of text_to_find to target (1 = first)",
}
_ALIGNMENT = {
    "type": "string",
    "enum": ["START", "CENTER", "END", "JUSTIFIED"],
    "description": "Paragraph alignment",
}

_TEXT_STYLE_PROPERTIES: dict[str, Any] = {
    "bold": {"type": "boolean"},
    "italic": {"type": "boolean"},
    "underline": {"type": "boolean"},
    "strikethrough": {"type": "boolean"},
    "font_size": {"type": "number", "minimum": 1, "description": "Font size in points"},
    "font_family": {"type": "string", "description": "Font family, e.g. 'Arial'"},
    "foreground_color": {
        "type": "string",
        "description": "Text color as hex (#RGB, #RRGGBB or RRGGBB)",
    },
    "background_color": {"type": "string", "description": "Highlight color as hex"},
    "link_url": {"type": "string", "description": "Turn the text into a link to this URL"},
}

_PARAGRAPH_STYLE_PROPERTIES: dict[str, Any] = {
    "alignment": _ALIGNMENT,
    "indent_start": {"type": "number", "minimum": 0, "description": "Left indent in points"},
    "indent_end": {"type": "number", "minimum": 0, "description": "Right indent in points"},
    "space_above": {"type": "number", "minimum": 0, "description": "Space above in points"},
    "space_below": {"type": "number", "minimum": 0, "description": "Space below in points"},
    "named_style_type": {
        "type": "string",
        "enum": [
            "NORMAL_TEXT",
            "TITLE",
            "SUBTITLE",
            "HEADING_1",
            "HEADING_2",
            "HEADING_3",
            "HEADING_4",
            "HEADING_5",
            "HEADING_6",
        ],
        "description": "Named paragraph style",
    },
    "keep_with_next": {"type": "boolean", "description": "Keep with the next paragraph"},
}


def _text_style_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "document_id": _DOCUMENT_ID,
            "start_index": _START_INDEX,
            "end_index": _END_INDEX,
            "text_to_find": _TEXT_TO_FIND,
            "match_instance": _MATCH_INSTANCE,
            "tab_id": _TAB_ID,
            **_TEXT_STYLE_PROPERTIES,
        },
        "required": ["document_id"],
    }


def _paragraph_style_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "document_id": _DOCUMENT_ID,
            "start_index": _START_INDEX,
            "end_index": _END_INDEX,
            "text_to_find": _TEXT_TO_FIND,
            "match_instance": _MATCH_INSTANCE,
            "index_within_paragraph": {
                "type": "integer",
                "minimum": 1,
                "description": "Any offset inside the paragraph to format",
            },
            "tab_id": _TAB_ID,
            **_PARAGRAPH_STYLE_PROPERTIES,
        },
        "required": ["document_id"],
    }


def build_tool_definitions() -> list[Tool]:
    """Return every tool the server exposes, in listing order."""
    return [
        # ---------------------------------------------------------------
        # Docs editing
        # ---------------------------------------------------------------
        Tool(
            name="insert_text",
            description="Insert text at a specific offset in a Google Doc.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "text": {"type": "string", "description": "Text to insert"},
                    "index": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Offset to insert at (1-based)",
                    },
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "text", "index"],
            },
        ),
        Tool(
            name="delete_range",
            description="Delete the content between two offsets in a Google Doc.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "start_index": _START_INDEX,
                    "end_index": _END_INDEX,
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "start_index", "end_index"],
            },
        ),
        Tool(
            name="apply_text_style",
            description=(
                "Apply character formatting (bold, italic, colors, font, link...) to a range, "
                "given either explicit offsets or text to find plus an occurrence number."
            ),
            inputSchema=_text_style_schema(),
        ),
        Tool(
            name="format_google_doc_text",
            description="Alias of apply_text_style.",
            inputSchema=_text_style_schema(),
        ),
        Tool(
            name="apply_paragraph_style",
            description=(
                "Apply paragraph formatting (alignment, indents, spacing, heading style) to the "
                "paragraph(s) covering a range, the paragraph containing some text, or the "
                "paragraph containing an offset."
            ),
            inputSchema=_paragraph_style_schema(),
        ),
        Tool(
            name="format_google_doc_paragraph",
            description="Alias of apply_paragraph_style.",
            inputSchema=_paragraph_style_schema(),
        ),
        Tool(
            name="find_and_replace_in_doc",
            description=(
                "Replace every occurrence of a string in a Google Doc. With dry_run, only "
                "count matches in body paragraphs (tables, headers and footers are not counted)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "find_text": {"type": "string", "description": "Text to find"},
                    "replace_text": {"type": "string", "description": "Replacement text"},
                    "match_case": {"type": "boolean", "default": False},
                    "dry_run": {
                        "type": "boolean",
                        "default": False,
                        "description": "Count approximate matches without changing the document",
                    },
                },
                "required": ["document_id", "find_text", "replace_text"],
            },
        ),
        Tool(
            name="insert_table",
            description="Insert an empty table at an offset in a Google Doc.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "rows": {"type": "integer", "minimum": 1},
                    "columns": {"type": "integer", "minimum": 1},
                    "index": {"type": "integer", "minimum": 1, "description": "Insert offset"},
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "rows", "columns", "index"],
            },
        ),
        Tool(
            name="edit_table_cell",
            description=(
                "Replace, restyle and/or realign the text of one table cell in a single update."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "table_start_index": {
                        "type": "integer",
                        "description": "Start offset of the table (from get_google_doc_content)",
                    },
                    "row_index": {"type": "integer", "minimum": 0, "description": "0-based row"},
                    "column_index": {
                        "type": "integer",
                        "minimum": 0,
                        "description": "0-based column",
                    },
                    "text_content": {"type": "string", "description": "New cell text"},
                    "bold": {"type": "boolean"},
                    "italic": {"type": "boolean"},
                    "font_size": {"type": "number", "minimum": 1},
                    "alignment": _ALIGNMENT,
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "table_start_index", "row_index", "column_index"],
            },
        ),
        Tool(
            name="insert_image_from_url",
            description="Insert a publicly accessible image (http/https URL) at an offset.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "image_url": {"type": "string", "description": "Public image URL"},
                    "index": {"type": "integer", "minimum": 1, "description": "Insert offset"},
                    "width": {"type": "number", "description": "Width in points (optional)"},
                    "height": {"type": "number", "description": "Height in points (optional)"},
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "image_url", "index"],
            },
        ),
        Tool(
            name="insert_smart_chip",
            description="Insert a person, date or file smart chip at an offset.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "chip_type": {
                        "type": "string",
                        "enum": ["person", "date", "file"],
                        "description": "Kind of chip to insert",
                    },
                    "index": {"type": "integer", "minimum": 1, "description": "Insert offset"},
                    "person_email": {
                        "type": "string",
                        "description": "Email address (required for person chips)",
                    },
                    "date": {
                        "type": "string",
                        "description": "Date such as 2024-03-15 (required for date chips)",
                    },
                    "file_id": {
                        "type": "string",
                        "description": "Drive file ID (required for file chips)",
                    },
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "chip_type", "index"],
            },
        ),
        # ---------------------------------------------------------------
        # Docs content and structure
        # ---------------------------------------------------------------
        Tool(
            name="create_google_doc",
            description="Create a new Google Doc, optionally filled with plain text.",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Document title"},
                    "content": {"type": "string", "description": "Initial text (optional)"},
                },
                "required": ["title"],
            },
        ),
        Tool(
            name="update_google_doc",
            description="Replace the entire body of a Google Doc with plain text.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "content": {"type": "string", "description": "New document text"},
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id", "content"],
            },
        ),
        Tool(
            name="read_google_doc",
            description=(
                "Read a Google Doc as plain text, markdown or raw JSON. Multi-tab documents "
                "are rendered tab by tab unless tab_id is given."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "format": {
                        "type": "string",
                        "enum": ["text", "json", "markdown"],
                        "default": "text",
                    },
                    "max_length": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Truncate output to this many characters",
                    },
                    "tab_id": _TAB_ID,
                },
                "required": ["document_id"],
            },
        ),
        Tool(
            name="get_google_doc_content",
            description=(
                "List the document text with [start-end] offsets for each line, for precise "
                "edits. Optionally include per-run formatting and a fonts summary."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "include_formatting": {"type": "boolean", "default": False},
                },
                "required": ["document_id"],
            },
        ),
        Tool(
            name="list_document_tabs",
            description="List the tabs of a Google Doc, including nested child tabs.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "include_content": {
                        "type": "boolean",
                        "default": False,
                        "description": "Include each tab's character count",
                    },
                },
                "required": ["document_id"],
            },
        ),
        Tool(
            name="add_document_tab",
            description="Create a new tab in a Google Doc. Returns the new tab ID.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "title": {"type": "string", "description": "Tab title"},
                    "icon_emoji": {"type": "string", "description": "Tab icon emoji (optional)"},
                    "parent_tab_id": {
                        "type": "string",
                        "description": "Create the tab nested under this tab (optional)",
                    },
                    "index": {"type": "integer", "minimum": 0, "description": "Tab position"},
                },
                "required": ["document_id", "title"],
            },
        ),
        Tool(
            name="rename_document_tab",
            description="Rename a tab (and optionally change its icon).",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "tab_id": {"type": "string", "description": "Tab ID"},
                    "title": {"type": "string", "description": "New title"},
                    "icon_emoji": {"type": "string", "description": "New icon emoji"},
                },
                "required": ["document_id", "tab_id", "title"],
            },
        ),
        Tool(
            name="read_smart_chips",
            description="List person and rich-link smart chips in a Google Doc.",
            inputSchema={
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID, "tab_id": _TAB_ID},
                "required": ["document_id"],
            },
        ),
        # ---------------------------------------------------------------
        # Drive metadata and comments
        # ---------------------------------------------------------------
        Tool(
            name="list_google_docs",
            description="List Google Docs in Drive, optionally filtered by name or content.",
            inputSchema={
                "type": "object",
                "properties": {
                    "max_results": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 100,
                        "default": 20,
                    },
                    "query": {"type": "string", "description": "Text to search for"},
                    "order_by": {
                        "type": "string",
                        "enum": ["name", "modifiedTime", "createdTime"],
                        "default": "modifiedTime",
                    },
                },
            },
        ),
        Tool(
            name="get_document_info",
            description="Get Drive metadata (owner, dates, sharing, link) for a Google Doc.",
            inputSchema={
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID},
                "required": ["document_id"],
            },
        ),
        Tool(
            name="list_comments",
            description="List comments on a Google Doc, with replies and quoted text.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "page_size": {"type": "integer", "minimum": 1, "maximum": 100, "default": 100},
                    "page_token": {"type": "string", "description": "Token for the next page"},
                    "include_deleted": {"type": "boolean", "default": False},
                },
                "required": ["document_id"],
            },
        ),
        Tool(
            name="get_comment",
            description="Get one comment and its replies.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "comment_id": {"type": "string", "description": "Comment ID"},
                },
                "required": ["document_id", "comment_id"],
            },
        ),
        Tool(
            name="add_comment",
            description="Add a comment anchored to a range of text.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "start_index": _START_INDEX,
                    "end_index": _END_INDEX,
                    "comment_text": {"type": "string", "description": "Comment body"},
                },
                "required": ["document_id", "start_index", "end_index", "comment_text"],
            },
        ),
        Tool(
            name="reply_to_comment",
            description="Reply to an existing comment.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "comment_id": {"type": "string", "description": "Comment ID"},
                    "reply_text": {"type": "string", "description": "Reply body"},
                },
                "required": ["document_id", "comment_id", "reply_text"],
            },
        ),
        Tool(
            name="delete_comment",
            description="Delete a comment.",
            inputSchema={
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "comment_id": {"type": "string", "description": "Comment ID"},
                },
                "required": ["document_id", "comment_id"],
            },
        ),
    ]
