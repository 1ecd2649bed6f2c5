"""Range addressing, text positioning and update construction for Google Docs.

Typical flow for a formatting edit::

    document = await client.get_document(document_id)
    body = document.body_for(tab_id)
    range_ = locate_text(body, "Quarterly results", instance=2)
    style = build_text_style_request(range_, TextStyle(bold=True))
    await BatchUpdateDispatcher(client).apply(document_id, [style.request])
"""

from gdrive_mcp.docs.batch import BatchUpdateDispatcher
from gdrive_mcp.docs.client import DOCS_API_BASE, DocsClient
from gdrive_mcp.docs.errors import (
    DocsError,
    DocumentNotFoundError,
    PermissionDeniedError,
    RemoteApiError,
    ValidationError,
)
from gdrive_mcp.docs.locator import collect_segments, locate_text
from gdrive_mcp.docs.models import Body, Document, Paragraph, Tab, Table
from gdrive_mcp.docs.paragraphs import find_table, resolve_paragraph
from gdrive_mcp.docs.ranges import Range, Segment, validate_range
from gdrive_mcp.docs.styles import (
    ParagraphStyle,
    StyleRequest,
    TextStyle,
    build_paragraph_style_request,
    build_text_style_request,
    hex_to_rgb_color,
    rgb_color_to_hex,
)

__all__ = [
    "BatchUpdateDispatcher",
    "Body",
    "DOCS_API_BASE",
    "DocsClient",
    "DocsError",
    "Document",
    "DocumentNotFoundError",
    "Paragraph",
    "ParagraphStyle",
    "PermissionDeniedError",
    "Range",
    "RemoteApiError",
    "Segment",
    "StyleRequest",
    "Tab",
    "Table",
    "TextStyle",
    "ValidationError",
    "build_paragraph_style_request",
    "build_text_style_request",
    "collect_segments",
    "find_table",
    "hex_to_rgb_color",
    "locate_text",
    "resolve_paragraph",
    "rgb_color_to_hex",
    "validate_range",
]
