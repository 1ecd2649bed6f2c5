"""Google Docs MCP server.

Exposes Google Docs editing (range-addressed and text-addressed formatting,
find-and-replace, tables, images, tabs) plus the Drive metadata and comment
operations that go with it, using OAuth tokens from TokenStorage.

Expired tokens are refreshed transparently through OAuthManager.
"""

import asyncio
import json
import logging
from typing import Any

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError as PydanticValidationError

from gdrive_mcp.auth import SERVICE_NAME, OAuthManager, TokenStatus, TokenStorage
from gdrive_mcp.docs import requests as docs_requests
from gdrive_mcp.docs.batch import BatchUpdateDispatcher
from gdrive_mcp.docs.client import DocsClient
from gdrive_mcp.docs.errors import DocsError, ValidationError
from gdrive_mcp.docs.extraction import (
    character_count,
    collect_smart_chips,
    collect_styled_segments,
    count_occurrences,
    extract_paragraph_text,
    extract_text,
    format_indexed_text,
    slice_text,
    summarize_fonts,
    truncate,
)
from gdrive_mcp.docs.locator import locate_text
from gdrive_mcp.docs.models import Body, Document, Tab
from gdrive_mcp.docs.paragraphs import find_table, resolve_paragraph
from gdrive_mcp.docs.ranges import Range, validate_range
from gdrive_mcp.docs.styles import (
    ParagraphStyle,
    TextStyle,
    build_paragraph_style_request,
    build_text_style_request,
    validate_colors,
)
from gdrive_mcp.server.tools import build_tool_definitions

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DOCS_WEB_BASE = "https://docs.google.com/document/d"
GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"

TEXT_STYLE_ARGUMENTS = tuple(TextStyle.model_fields)
PARAGRAPH_STYLE_ARGUMENTS = tuple(ParagraphStyle.model_fields)


def escape_drive_query(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _pick(arguments: dict[str, Any], names: tuple[str, ...]) -> dict[str, Any]:
    return {name: arguments[name] for name in names if arguments.get(name) is not None}


def _parse_style(model: type[TextStyle] | type[ParagraphStyle], values: dict[str, Any]) -> Any:
    """Validate style arguments, reporting the first problem as a ValidationError."""
    try:
        return model.model_validate(values)
    except PydanticValidationError as e:
        detail = e.errors()[0]
        field = ".".join(str(part) for part in detail["loc"])
        raise ValidationError(f"Invalid style option {field}: {detail['msg']}") from e


class GoogleDriveServer:
    """MCP server for Google Docs and the Drive operations around them.

    Attributes:
        server: MCP Server instance.
        storage: TokenStorage for retrieving OAuth tokens.
        manager: OAuthManager for token refresh operations.
        docs: Docs API client sharing the server's authenticated requests.
        dispatcher: Sends update instructions as atomic batches.
    """

    def __init__(self) -> None:
        self.server = Server("gdrive-mcp")
        self.storage = TokenStorage()
        self.manager = OAuthManager(storage=self.storage)
        self._http_client: httpx.AsyncClient | None = None
        self.docs = DocsClient(self._make_request)
        self.dispatcher = BatchUpdateDispatcher(self.docs)
        self._setup_handlers()

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client (pooled, HTTP/2)."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return build_tool_definitions()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            result = await self._execute_tool(name, arguments or {})
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run a tool, turning failures into an error payload for the client."""
        try:
            return await self._dispatch_tool(name, arguments)
        except DocsError as e:
            logger.warning(f"Tool {name} failed: {e.message}")
            return e.to_dict()
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            return {"error": str(e)}

    async def _get_access_token(self) -> str:
        """Get a valid access token, refreshing if necessary.

        Raises:
            RuntimeError: If no token is available or refresh fails.
        """
        status = self.storage.get_status(SERVICE_NAME)

        if status == TokenStatus.MISSING:
            raise RuntimeError(
                f"No OAuth token found for service '{SERVICE_NAME}'. "
                "Please authenticate first using: gdrive-mcp setup"
            )

        if status == TokenStatus.INVALID:
            raise RuntimeError(
                f"OAuth token for service '{SERVICE_NAME}' is invalid or corrupted. "
                "Please re-authenticate using: gdrive-mcp setup"
            )

        if status == TokenStatus.EXPIRED:
            logger.info("Token expired, attempting refresh...")
            token = await self.manager.refresh_if_needed()
            if token is None:
                raise RuntimeError(
                    "Token refresh failed. Please re-authenticate using: gdrive-mcp setup"
                )
            return token.access_token

        stored = self.storage.retrieve(SERVICE_NAME)
        if stored is None:
            raise RuntimeError("Unexpected error: token retrieval failed")

        return stored.token.access_token

    async def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to a Google API and return its JSON body.

        Raises:
            httpx.HTTPStatusError: If the request fails.
        """
        access_token = await self._get_access_token()
        client = await self._get_http_client()

        response = await client.request(
            method=method,
            url=url,
            params=params,
            json=json_data,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result

    async def _make_delete_request(self, url: str) -> None:
        """Make an authenticated DELETE request (no response body expected)."""
        access_token = await self._get_access_token()
        client = await self._get_http_client()

        response = await client.delete(
            url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response.raise_for_status()

    async def _dispatch_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Route a tool call to its handler.

        Raises:
            ValueError: If the tool name is not recognized.
        """
        handlers = {
            # Docs editing
            "insert_text": self._insert_text,
            "delete_range": self._delete_range,
            "apply_text_style": self._apply_text_style,
            "format_google_doc_text": self._apply_text_style,
            "apply_paragraph_style": self._apply_paragraph_style,
            "format_google_doc_paragraph": self._apply_paragraph_style,
            "find_and_replace_in_doc": self._find_and_replace_in_doc,
            "insert_table": self._insert_table,
            "edit_table_cell": self._edit_table_cell,
            "insert_image_from_url": self._insert_image_from_url,
            "insert_smart_chip": self._insert_smart_chip,
            # Docs content and structure
            "create_google_doc": self._create_google_doc,
            "update_google_doc": self._update_google_doc,
            "read_google_doc": self._read_google_doc,
            "get_google_doc_content": self._get_google_doc_content,
            "list_document_tabs": self._list_document_tabs,
            "add_document_tab": self._add_document_tab,
            "rename_document_tab": self._rename_document_tab,
            "read_smart_chips": self._read_smart_chips,
            # Drive metadata and comments
            "list_google_docs": self._list_google_docs,
            "get_document_info": self._get_document_info,
            "list_comments": self._list_comments,
            "get_comment": self._get_comment,
            "add_comment": self._add_comment,
            "reply_to_comment": self._reply_to_comment,
            "delete_comment": self._delete_comment,
        }

        handler = handlers.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")

        return await handler(arguments)

    # =========================================================================
    # Shared lookups
    # =========================================================================

    async def _load_document(self, document_id: str, tab_id: str | None = None) -> Document:
        return await self.docs.get_document(document_id, include_tabs=tab_id is not None)

    @staticmethod
    def _tab_not_found(document: Document, document_id: str, tab_id: str) -> dict[str, Any]:
        return {
            "error": (
                f'Tab with ID "{tab_id}" not found. '
                "Use list_document_tabs to see available tabs."
            ),
            "document_id": document_id,
            "available_tabs": [tab.tab_id for tab in document.iter_tabs()],
        }

    def _resolve_text_range(
        self, arguments: dict[str, Any], body: Body, tab_id: str | None
    ) -> Range | None:
        return locate_text(
            body,
            arguments["text_to_find"],
            instance=arguments.get("match_instance", 1),
            tab_id=tab_id,
        )

    # =========================================================================
    # Docs editing
    # =========================================================================

    async def _insert_text(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Insert text at an offset.

        Args:
            arguments: Tool arguments with document_id, text, index and optional tab_id.

        Returns:
            Insertion confirmation.
        """
        document_id = arguments["document_id"]
        text = arguments["text"]
        index = arguments["index"]
        tab_id = arguments.get("tab_id")

        if not text:
            raise ValidationError("text must not be empty", document_id=document_id)

        request = docs_requests.insert_text(text, index, tab_id)
        await self.dispatcher.apply(document_id, [request])

        return {
            "status": "inserted",
            "document_id": document_id,
            "index": index,
            "text_length": len(text),
        }

    async def _delete_range(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Delete ``[start_index, end_index)``; bad ranges never reach the API."""
        document_id = arguments["document_id"]
        target = validate_range(
            arguments["start_index"], arguments["end_index"], arguments.get("tab_id")
        )

        await self.dispatcher.apply(document_id, [docs_requests.delete_content_range(target)])

        return {
            "status": "deleted",
            "document_id": document_id,
            "start_index": target.start_index,
            "end_index": target.end_index,
        }

    async def _apply_text_style(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Apply character formatting to explicit offsets or to found text.

        Args:
            arguments: Tool arguments with document_id, either start_index/end_index or
                text_to_find (+ match_instance), optional tab_id and style options.

        Returns:
            The styled range and the fields that were updated.
        """
        document_id = arguments["document_id"]
        tab_id = arguments.get("tab_id")

        style = _parse_style(TextStyle, _pick(arguments, TEXT_STYLE_ARGUMENTS))
        if not style.model_dump(exclude_none=True):
            return {"error": "No valid style options provided", "document_id": document_id}
        validate_colors(style)

        start_index = arguments.get("start_index")
        end_index = arguments.get("end_index")

        if start_index is not None and end_index is not None:
            target = validate_range(start_index, end_index, tab_id)
        elif arguments.get("text_to_find"):
            document = await self._load_document(document_id, tab_id)
            body = document.body_for(tab_id)
            if body is None:
                return self._tab_not_found(document, document_id, tab_id)
            target = self._resolve_text_range(arguments, body, tab_id)
            if target is None:
                return {
                    "error": f'Text "{arguments["text_to_find"]}" not found in document',
                    "document_id": document_id,
                    "match_instance": arguments.get("match_instance", 1),
                }
        else:
            return {
                "error": "Must provide either start_index+end_index or text_to_find",
                "document_id": document_id,
            }

        style_request = build_text_style_request(target, style)
        await self.dispatcher.apply(document_id, [style_request.request])

        return {
            "status": "styled",
            "document_id": document_id,
            "start_index": target.start_index,
            "end_index": target.end_index,
            "fields": style_request.fields,
        }

    async def _apply_paragraph_style(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Apply paragraph formatting.

        The target is an explicit range, the paragraph containing the Nth
        occurrence of text_to_find, or the paragraph containing
        index_within_paragraph, checked in that order.

        Args:
            arguments: Tool arguments with document_id, a target and style options.

        Returns:
            The styled range and the fields that were updated.
        """
        document_id = arguments["document_id"]
        tab_id = arguments.get("tab_id")

        style = _parse_style(ParagraphStyle, _pick(arguments, PARAGRAPH_STYLE_ARGUMENTS))
        if not style.model_dump(exclude_none=True):
            return {"error": "No valid style options provided", "document_id": document_id}

        start_index = arguments.get("start_index")
        end_index = arguments.get("end_index")
        index_within = arguments.get("index_within_paragraph")

        if start_index is not None and end_index is not None:
            target = validate_range(start_index, end_index, tab_id)
        elif arguments.get("text_to_find") or index_within is not None:
            document = await self._load_document(document_id, tab_id)
            body = document.body_for(tab_id)
            if body is None:
                return self._tab_not_found(document, document_id, tab_id)

            if arguments.get("text_to_find"):
                found = self._resolve_text_range(arguments, body, tab_id)
                if found is None:
                    return {
                        "error": f'Text "{arguments["text_to_find"]}" not found in document',
                        "document_id": document_id,
                    }
                offset = found.start_index
            else:
                offset = index_within

            target = resolve_paragraph(body, offset, tab_id)
            if target is None:
                return {
                    "error": "Could not determine paragraph boundaries",
                    "document_id": document_id,
                    "index": offset,
                }
        else:
            return {
                "error": (
                    "Must provide either start_index+end_index, text_to_find, "
                    "or index_within_paragraph"
                ),
                "document_id": document_id,
            }

        style_request = build_paragraph_style_request(target, style)
        await self.dispatcher.apply(document_id, [style_request.request])

        return {
            "status": "styled",
            "document_id": document_id,
            "start_index": target.start_index,
            "end_index": target.end_index,
            "fields": style_request.fields,
        }

    async def _find_and_replace_in_doc(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Replace all occurrences of a string, or count them in dry-run mode.

        The dry-run count only covers top-level body paragraphs while the
        real replacement also reaches tables, headers and footers, so the
        preview can under-count.
        """
        document_id = arguments["document_id"]
        find_text = arguments["find_text"]
        replace_text = arguments["replace_text"]
        match_case = arguments.get("match_case", False)

        request = docs_requests.replace_all_text(find_text, replace_text, match_case)

        if arguments.get("dry_run", False):
            document = await self.docs.get_document(document_id)
            body = document.body_for(None)
            count = count_occurrences(extract_paragraph_text(body.content), find_text, match_case)
            return {
                "status": "dry_run",
                "document_id": document_id,
                "occurrences_found": count,
                "message": (
                    f'Dry run (paragraph text only, approximate): found {count} occurrence(s) '
                    f'of "{find_text}". Note: actual replacement covers the full document '
                    "including tables, headers, and footers."
                ),
            }

        response = await self.dispatcher.apply(document_id, [request])
        replies = response.get("replies") or [{}]
        occurrences = (replies[0].get("replaceAllText") or {}).get("occurrencesChanged", 0)

        return {
            "status": "replaced",
            "document_id": document_id,
            "occurrences_changed": occurrences,
        }

    async def _insert_table(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        rows = arguments["rows"]
        columns = arguments["columns"]
        index = arguments["index"]

        request = docs_requests.insert_table(rows, columns, index, arguments.get("tab_id"))
        await self.dispatcher.apply(document_id, [request])

        return {
            "status": "inserted",
            "document_id": document_id,
            "rows": rows,
            "columns": columns,
            "index": index,
        }

    async def _edit_table_cell(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Rewrite one table cell's text, style and alignment in one batch.

        Args:
            arguments: Tool arguments with document_id, table_start_index, row_index,
                column_index and optional text_content, bold, italic, font_size, alignment.

        Returns:
            Edit confirmation with the number of instructions sent.
        """
        document_id = arguments["document_id"]
        table_start = arguments["table_start_index"]
        row_index = arguments["row_index"]
        column_index = arguments["column_index"]
        tab_id = arguments.get("tab_id")

        text_style = None
        style_values = _pick(arguments, ("bold", "italic", "font_size"))
        if style_values:
            text_style = _parse_style(TextStyle, style_values)
        alignment = arguments.get("alignment")
        if alignment is not None:
            _parse_style(ParagraphStyle, {"alignment": alignment})

        document = await self._load_document(document_id, tab_id)
        body = document.body_for(tab_id)
        if body is None:
            return self._tab_not_found(document, document_id, tab_id)

        table = find_table(body, table_start)
        if table is None:
            return {"error": f"No table found at index {table_start}", "document_id": document_id}
        if not 0 <= row_index < len(table.rows):
            return {"error": f"Row {row_index} not found in table", "document_id": document_id}
        cell = table.cell(row_index, column_index)
        if cell is None:
            return {
                "error": f"Column {column_index} not found in row {row_index}",
                "document_id": document_id,
            }

        requests = docs_requests.plan_cell_rewrite(
            cell,
            text_content=arguments.get("text_content"),
            text_style=text_style,
            alignment=alignment,
            tab_id=tab_id,
        )
        if not requests:
            return {"error": "No changes specified for the table cell", "document_id": document_id}

        await self.dispatcher.apply(document_id, requests)

        return {
            "status": "edited",
            "document_id": document_id,
            "row_index": row_index,
            "column_index": column_index,
            "request_count": len(requests),
        }

    async def _insert_image_from_url(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        image_url = arguments["image_url"]
        index = arguments["index"]

        request = docs_requests.insert_inline_image(
            image_url,
            index,
            width=arguments.get("width"),
            height=arguments.get("height"),
            tab_id=arguments.get("tab_id"),
        )
        response = await self.dispatcher.apply(document_id, [request])

        result: dict[str, Any] = {
            "status": "inserted",
            "document_id": document_id,
            "index": index,
            "image_url": image_url,
        }
        replies = response.get("replies") or [{}]
        object_id = (replies[0].get("insertInlineImage") or {}).get("objectId")
        if object_id:
            result["object_id"] = object_id
        return result

    async def _insert_smart_chip(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        chip_type = arguments["chip_type"]
        index = arguments["index"]

        request = docs_requests.insert_smart_chip(
            chip_type,
            index,
            person_email=arguments.get("person_email"),
            date=arguments.get("date"),
            file_id=arguments.get("file_id"),
            tab_id=arguments.get("tab_id"),
        )
        await self.dispatcher.apply(document_id, [request])

        return {
            "status": "inserted",
            "document_id": document_id,
            "chip_type": chip_type,
            "index": index,
        }

    # =========================================================================
    # Docs content and structure
    # =========================================================================

    async def _create_google_doc(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Create a document and fill it with plain text in one batch."""
        title = arguments["title"]
        content = arguments.get("content") or ""

        created = await self.docs.create_document(title)
        document_id = created.get("documentId")

        if content:
            await self.dispatcher.apply(document_id, docs_requests.plan_initial_content(content))

        return {
            "status": "created",
            "document_id": document_id,
            "title": created.get("title", title),
            "link": f"{DOCS_WEB_BASE}/{document_id}/edit",
            "content_length": len(content),
        }

    async def _update_google_doc(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Replace the body of a document (or one tab) with plain text."""
        document_id = arguments["document_id"]
        content = arguments["content"]
        tab_id = arguments.get("tab_id")

        document = await self._load_document(document_id, tab_id)
        body = document.body_for(tab_id)
        if body is None:
            return self._tab_not_found(document, document_id, tab_id)

        requests = docs_requests.plan_body_replacement(body, content, tab_id)
        await self.dispatcher.apply(document_id, requests)

        return {
            "status": "updated",
            "document_id": document_id,
            "title": document.title,
            "content_length": len(content),
        }

    async def _read_google_doc(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Read a document as text, markdown or JSON.

        Args:
            arguments: Tool arguments with document_id and optional format,
                max_length and tab_id.

        Returns:
            Document title and rendered content.
        """
        document_id = arguments["document_id"]
        output_format = arguments.get("format", "text")
        max_length = arguments.get("max_length")
        tab_id = arguments.get("tab_id")

        raw = await self.docs.get_document_json(document_id, include_tabs=True)

        if output_format == "json":
            return {
                "document_id": document_id,
                "format": "json",
                "content": truncate(json.dumps(raw, indent=2), max_length),
            }

        document = Document.from_api(raw)
        tabs = list(document.iter_tabs())

        if tab_id:
            tab = document.find_tab(tab_id)
            if tab is None:
                return self._tab_not_found(document, document_id, tab_id)
            text = extract_text(tab.body.content)
        elif len(tabs) > 1:
            text = "".join(
                f"=== Tab: {tab.title or 'Untitled'} ===\n{extract_text(tab.body.content)}\n"
                for tab in tabs
            )
        else:
            text = extract_text(document.body_for(None).content)

        if output_format == "markdown":
            text = f"# {document.title}\n\n{text}"

        return {
            "document_id": document_id,
            "title": document.title,
            "format": output_format,
            "content": truncate(text, max_length),
        }

    async def _get_google_doc_content(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """List document text with offsets so callers can target precise ranges."""
        document_id = arguments["document_id"]
        with_formatting = arguments.get("include_formatting", False)

        document = await self.docs.get_document(document_id, include_tabs=True)
        tabs = list(document.iter_tabs())

        sections: list[tuple[str | None, Body]]
        if len(tabs) > 1:
            sections = [(tab.title or "Untitled", tab.body) for tab in tabs]
        else:
            sections = [(None, document.body_for(None))]

        parts = ["Document content with indices:\n\n"]
        all_segments = []
        total_length = 0
        for title, body in sections:
            segments = collect_styled_segments(body.content)
            all_segments.extend(segments)
            if title is not None:
                parts.append(f"=== Tab: {title} ===\n")
            parts.append(format_indexed_text(segments, with_formatting))
            if title is not None:
                parts.append("\n")
            if segments:
                total_length += max(segment.end for segment in segments)

        result: dict[str, Any] = {"document_id": document_id, "title": document.title}
        if with_formatting:
            fonts = summarize_fonts(all_segments)
            if fonts:
                parts.append("\n--- Fonts summary ---\n")
                parts.extend(f"{font.describe()}\n" for font in fonts)
            result["fonts"] = [font.font_family for font in fonts]

        parts.append(f"\nTotal length: {total_length} characters")
        result["content"] = "".join(parts)
        result["total_length"] = total_length
        return result

    def _format_tab(self, tab: Tab, include_content: bool) -> dict[str, Any]:
        formatted: dict[str, Any] = {
            "tab_id": tab.tab_id,
            "title": tab.title,
            "index": tab.index,
            "nesting_level": tab.nesting_level,
        }
        if tab.icon_emoji:
            formatted["icon_emoji"] = tab.icon_emoji
        if tab.parent_tab_id:
            formatted["parent_tab_id"] = tab.parent_tab_id
        if include_content:
            formatted["character_count"] = character_count(tab.body.content)
        if tab.child_tabs:
            formatted["child_tabs"] = [
                self._format_tab(child, include_content) for child in tab.child_tabs
            ]
        return formatted

    async def _list_document_tabs(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """List tabs with their nested children and, optionally, character counts."""
        document_id = arguments["document_id"]
        include_content = arguments.get("include_content", False)

        document = await self.docs.get_document(document_id, include_tabs=True)

        if not document.tabs:
            result: dict[str, Any] = {
                "document_id": document_id,
                "title": document.title,
                "tabs": [],
                "count": 0,
                "message": "Document has a single tab (standard format)",
            }
            if include_content:
                result["character_count"] = character_count(document.body.content)
            return result

        return {
            "document_id": document_id,
            "title": document.title,
            "tabs": [self._format_tab(tab, include_content) for tab in document.tabs],
            "count": sum(1 for _ in document.iter_tabs()),
        }

    async def _add_document_tab(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        title = arguments["title"]

        request = docs_requests.create_tab(
            title,
            icon_emoji=arguments.get("icon_emoji"),
            parent_tab_id=arguments.get("parent_tab_id"),
            index=arguments.get("index"),
        )
        response = await self.dispatcher.apply(document_id, [request])

        result = {"status": "created", "document_id": document_id, "title": title}
        replies = response.get("replies") or [{}]
        created_tab = replies[0].get("createTab") or {}
        if created_tab.get("tabId"):
            result["tab_id"] = created_tab["tabId"]
        return result

    async def _rename_document_tab(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        tab_id = arguments["tab_id"]

        request = docs_requests.update_tab_properties(
            tab_id, title=arguments.get("title"), iconEmoji=arguments.get("icon_emoji")
        )
        await self.dispatcher.apply(document_id, [request])

        return {
            "status": "updated",
            "document_id": document_id,
            "tab_id": tab_id,
            "updated_fields": request["updateTabProperties"]["fields"].split(","),
        }

    async def _read_smart_chips(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        tab_id = arguments.get("tab_id")

        document = await self._load_document(document_id, tab_id)
        body = document.body_for(tab_id)
        if body is None:
            return self._tab_not_found(document, document_id, tab_id)

        chips = collect_smart_chips(body.content)
        result: dict[str, Any] = {"document_id": document_id, "chips": chips, "count": len(chips)}
        if not chips:
            result["message"] = "No smart chips detected."
        return result

    # =========================================================================
    # Drive metadata and comments
    # =========================================================================

    async def _list_google_docs(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """List Google Docs, optionally matching a name/full-text query."""
        max_results = arguments.get("max_results", 20)
        query = arguments.get("query")
        order_by = arguments.get("order_by", "modifiedTime")

        q = f"mimeType='{GOOGLE_DOC_MIME_TYPE}' and trashed=false"
        if query:
            escaped = escape_drive_query(query)
            q += f" and (name contains '{escaped}' or fullText contains '{escaped}')"

        # Drive rejects orderBy together with fullText search
        params: dict[str, Any] = {
            "q": q,
            "pageSize": max_results,
            "fields": (
                "files(id,name,modifiedTime,createdTime,webViewLink,"
                "owners(displayName,emailAddress))"
            ),
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        if not query:
            params["orderBy"] = "modifiedTime desc" if order_by == "modifiedTime" else order_by

        response = await self._make_request("GET", f"{DRIVE_API_BASE}/files", params=params)

        documents = []
        for item in response.get("files", []):
            owners = item.get("owners") or [{}]
            documents.append(
                {
                    "id": item.get("id"),
                    "name": item.get("name"),
                    "modified_time": item.get("modifiedTime"),
                    "created_time": item.get("createdTime"),
                    "owner": owners[0].get("displayName", "Unknown"),
                    "link": item.get("webViewLink"),
                }
            )

        return {"documents": documents, "count": len(documents)}

    async def _get_document_info(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]

        params = {
            "fields": (
                "id,name,description,mimeType,createdTime,modifiedTime,webViewLink,"
                "owners(displayName,emailAddress),lastModifyingUser(displayName,emailAddress),"
                "shared,parents,version"
            ),
            "supportsAllDrives": "true",
        }
        file = await self._make_request(
            "GET", f"{DRIVE_API_BASE}/files/{document_id}", params=params
        )

        owners = file.get("owners") or [{}]
        last_modifier = file.get("lastModifyingUser") or {}
        return {
            "id": file.get("id"),
            "name": file.get("name"),
            "description": file.get("description"),
            "mime_type": file.get("mimeType"),
            "created_time": file.get("createdTime"),
            "modified_time": file.get("modifiedTime"),
            "owner_name": owners[0].get("displayName"),
            "owner_email": owners[0].get("emailAddress"),
            "last_modified_by": last_modifier.get("displayName"),
            "shared": file.get("shared", False),
            "version": file.get("version"),
            "link": file.get("webViewLink"),
        }

    @staticmethod
    def _format_author(item: dict[str, Any]) -> dict[str, Any]:
        author = item.get("author", {})
        return {
            "author_name": author.get("displayName", "Unknown"),
            "author_email": author.get("emailAddress", ""),
        }

    def _format_comment(self, comment: dict[str, Any]) -> dict[str, Any]:
        formatted: dict[str, Any] = {
            "id": comment.get("id"),
            **self._format_author(comment),
            "created_time": comment.get("createdTime", ""),
            "modified_time": comment.get("modifiedTime", ""),
            "resolved": comment.get("resolved", False),
            "deleted": comment.get("deleted", False),
            "content": comment.get("content", ""),
        }

        quoted = (comment.get("quotedFileContent") or {}).get("value")
        if quoted:
            formatted["quoted_text"] = quoted

        replies = comment.get("replies", [])
        if replies:
            formatted["replies"] = [
                {
                    "id": reply.get("id"),
                    **self._format_author(reply),
                    "created_time": reply.get("createdTime", ""),
                    "content": reply.get("content", ""),
                }
                for reply in replies
            ]
            formatted["reply_count"] = len(replies)

        return formatted

    async def _list_comments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """List comments on a document.

        Args:
            arguments: Tool arguments with document_id and optional page_size,
                page_token, include_deleted.

        Returns:
            Comments (with replies and quoted text) and the next page token.
        """
        document_id = arguments["document_id"]

        params: dict[str, Any] = {
            "fields": (
                "comments(id,content,quotedFileContent,author(displayName,emailAddress),"
                "createdTime,modifiedTime,resolved,deleted,"
                "replies(id,content,author(displayName,emailAddress),createdTime)),"
                "nextPageToken"
            ),
            "pageSize": min(arguments.get("page_size", 100), 100),
            "includeDeleted": str(arguments.get("include_deleted", False)).lower(),
        }
        if arguments.get("page_token"):
            params["pageToken"] = arguments["page_token"]

        response = await self._make_request(
            "GET", f"{DRIVE_API_BASE}/files/{document_id}/comments", params=params
        )

        comments = [self._format_comment(comment) for comment in response.get("comments", [])]
        result: dict[str, Any] = {
            "document_id": document_id,
            "comments": comments,
            "count": len(comments),
        }
        if not comments:
            result["message"] = "No comments found in this document."
        if response.get("nextPageToken"):
            result["next_page_token"] = response["nextPageToken"]
        return result

    async def _get_comment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        comment_id = arguments["comment_id"]

        params = {
            "fields": (
                "id,content,quotedFileContent,author(displayName,emailAddress),createdTime,"
                "modifiedTime,resolved,replies(id,content,author(displayName,emailAddress),"
                "createdTime)"
            )
        }
        comment = await self._make_request(
            "GET", f"{DRIVE_API_BASE}/files/{document_id}/comments/{comment_id}", params=params
        )
        return self._format_comment(comment)

    async def _add_comment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Add a comment anchored to ``[start_index, end_index)``.

        The quoted text is sliced locally from the current document. The
        anchor uses Drive's undocumented text-anchor shape with a 0-based
        offset, so Docs may show the comment unanchored if that format changes.
        """
        document_id = arguments["document_id"]
        comment_text = arguments["comment_text"]
        target = validate_range(arguments["start_index"], arguments["end_index"])

        document = await self.docs.get_document(document_id)
        quoted_text = slice_text(document.body_for(None).content, target)

        anchor = {
            "r": document_id,
            "a": [
                {
                    "txt": {
                        "o": target.start_index - 1,
                        "l": target.length,
                        "ml": target.length,
                    }
                }
            ],
        }
        body = {
            "content": comment_text,
            "quotedFileContent": {"value": quoted_text, "mimeType": "text/html"},
            "anchor": json.dumps(anchor),
        }
        params = {
            "fields": "id,content,quotedFileContent,author(displayName,emailAddress),createdTime"
        }

        response = await self._make_request(
            "POST",
            f"{DRIVE_API_BASE}/files/{document_id}/comments",
            params=params,
            json_data=body,
        )

        return {
            "status": "created",
            "document_id": document_id,
            "comment_id": response.get("id"),
            "quoted_text": quoted_text,
            "message": "Comment added successfully.",
        }

    async def _reply_to_comment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        comment_id = arguments["comment_id"]

        response = await self._make_request(
            "POST",
            f"{DRIVE_API_BASE}/files/{document_id}/comments/{comment_id}/replies",
            params={"fields": "id,content,author(displayName,emailAddress),createdTime"},
            json_data={"content": arguments["reply_text"]},
        )

        return {
            "status": "created",
            "document_id": document_id,
            "comment_id": comment_id,
            "reply_id": response.get("id"),
            "message": "Reply added successfully.",
        }

    async def _delete_comment(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document_id = arguments["document_id"]
        comment_id = arguments["comment_id"]

        await self._make_delete_request(
            f"{DRIVE_API_BASE}/files/{document_id}/comments/{comment_id}"
        )

        return {"status": "deleted", "document_id": document_id, "comment_id": comment_id}

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()


def main() -> None:
    """Entry point for the Google Docs MCP server."""
    server = GoogleDriveServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
