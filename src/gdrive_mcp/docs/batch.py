"""Atomic submission of update instructions."""

import logging
from typing import Any

import httpx

from gdrive_mcp.docs.client import DocsClient
from gdrive_mcp.docs.errors import map_http_error

logger = logging.getLogger(__name__)


class BatchUpdateDispatcher:
    """Sends an ordered list of instructions as one ``batchUpdate`` call.

    The service applies the whole list atomically and in order, so callers
    must compute every offset in the list from the same pre-batch snapshot.
    No retries are attempted.

    Attributes:
        client: Document service client used for the call.
    """

    def __init__(self, client: DocsClient) -> None:
        self.client = client

    async def apply(self, document_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        """Submit ``requests`` and return the service reply.

        Args:
            document_id: Target document.
            requests: Instructions in application order.

        Returns:
            The raw batch reply (``{"replies": [...], ...}``), or ``{}`` when
            there was nothing to send.

        Raises:
            DocumentNotFoundError: HTTP 404.
            PermissionDeniedError: HTTP 403.
            RemoteApiError: Any other HTTP or transport failure.
        """
        if not requests:
            return {}

        logger.info(f"Sending batchUpdate with {len(requests)} request(s) to {document_id}")
        try:
            return await self.client.batch_update(document_id, requests)
        except httpx.HTTPError as e:
            logger.warning(f"batchUpdate on {document_id} failed: {e}")
            raise map_http_error(e, document_id) from e
