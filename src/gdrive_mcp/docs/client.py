"""Thin Google Docs API v1 client over an authenticated request callable."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from gdrive_mcp.docs.errors import map_http_error
from gdrive_mcp.docs.models import Document

logger = logging.getLogger(__name__)

DOCS_API_BASE = "https://docs.googleapis.com/v1"

# (method, url, params=None, json_data=None) -> parsed JSON body
RequestFn = Callable[..., Awaitable[dict[str, Any]]]


class DocsClient:
    """Fetches and mutates documents through the Docs REST API.

    The client owns no HTTP state: it is built on the server's authenticated
    ``_make_request`` so token refresh and connection pooling stay in one
    place, and tests can pass a fake coroutine instead.

    Attributes:
        request: Async callable performing one authenticated API call.
    """

    def __init__(self, request: RequestFn) -> None:
        self.request = request

    async def get_document_json(
        self,
        document_id: str,
        include_tabs: bool = False,
        fields: str | None = None,
    ) -> dict[str, Any]:
        """Fetch the raw document JSON.

        Raises:
            DocsError: Mapped from the HTTP failure (404, 403, other).
        """
        params: dict[str, Any] = {}
        if include_tabs:
            params["includeTabsContent"] = "true"
        if fields:
            params["fields"] = fields

        url = f"{DOCS_API_BASE}/documents/{document_id}"
        try:
            return await self.request("GET", url, params=params or None)
        except httpx.HTTPError as e:
            logger.warning(f"Fetching document {document_id} failed: {e}")
            raise map_http_error(e, document_id) from e

    async def get_document(
        self,
        document_id: str,
        include_tabs: bool = False,
        fields: str | None = None,
    ) -> Document:
        raw = await self.get_document_json(document_id, include_tabs=include_tabs, fields=fields)
        return Document.from_api(raw)

    async def batch_update(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """POST ``documents/{id}:batchUpdate``; HTTP errors propagate unmapped."""
        url = f"{DOCS_API_BASE}/documents/{document_id}:batchUpdate"
        return await self.request("POST", url, json_data={"requests": requests})

    async def create_document(self, title: str) -> dict[str, Any]:
        url = f"{DOCS_API_BASE}/documents"
        return await self.request("POST", url, json_data={"title": title})
