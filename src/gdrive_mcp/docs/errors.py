"""Error taxonomy for Google Docs editing operations.

Every error carries a ``context`` dictionary (document ID, requested range,
search text...) so the tool layer can build an actionable message without
re-deriving what was being attempted.
"""

from typing import Any

import httpx


class DocsError(Exception):
    """Base class for document editing failures."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = {key: value for key, value in context.items() if value is not None}

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"error": self.message, **self.context}


class ValidationError(DocsError, ValueError):
    """Caller-supplied value is malformed (range, instance, color, style).

    Raised before any network call is made.
    """


class DocumentNotFoundError(DocsError):
    """The remote service reported the document does not exist (HTTP 404)."""


class PermissionDeniedError(DocsError):
    """The authenticated user may not access the document (HTTP 403)."""


class RemoteApiError(DocsError):
    """Any other remote failure; the remote message is preserved verbatim."""

    def __init__(self, message: str, status_code: int | None = None, **context: Any) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code


def _remote_message(error: httpx.HTTPError) -> str:
    """Extract the human-readable message from a Google API error response."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            payload = error.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            detail = payload.get("error")
            if isinstance(detail, dict) and detail.get("message"):
                return str(detail["message"])
            if isinstance(detail, str):
                return detail
    return str(error)


def map_http_error(error: httpx.HTTPError, document_id: str) -> DocsError:
    """Translate an httpx failure into the matching domain error.

    Args:
        error: The error raised by the HTTP layer.
        document_id: Document the failed call addressed.

    Returns:
        DocumentNotFoundError for 404, PermissionDeniedError for 403,
        RemoteApiError for everything else (including transport errors).
    """
    status_code = None
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code

    if status_code == 404:
        return DocumentNotFoundError(
            f"Document not found (ID: {document_id})", document_id=document_id
        )
    if status_code == 403:
        return PermissionDeniedError(
            f"Permission denied for document (ID: {document_id})", document_id=document_id
        )

    return RemoteApiError(
        f"Google Docs API Error: {_remote_message(error)}",
        status_code=status_code,
        document_id=document_id,
    )
