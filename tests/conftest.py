"""Shared pytest fixtures for gdrive-mcp tests.

This module provides reusable fixtures for testing OAuth authentication,
token storage, and builders for synthetic Google Docs API responses.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from gdrive_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata

# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def valid_token() -> OAuthToken:
    """Create a valid, non-expired OAuth token."""
    return OAuthToken(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=[
            "https://www.googleapis.com/auth/drive",
            "https://www.googleapis.com/auth/documents",
        ],
        token_type="Bearer",
    )


@pytest.fixture
def expired_token() -> OAuthToken:
    """Create an expired OAuth token."""
    return OAuthToken(
        access_token="expired_access_token",
        refresh_token="test_refresh_token",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/documents"],
        token_type="Bearer",
    )


@pytest.fixture
def token_metadata() -> TokenMetadata:
    """Create token metadata for testing."""
    return TokenMetadata(
        service_name="gdrive-mcp",
        provider="google",
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


@pytest.fixture
def stored_token(valid_token: OAuthToken, token_metadata: TokenMetadata) -> StoredToken:
    """Create a complete stored token for testing."""
    return StoredToken(
        version=1,
        metadata=token_metadata,
        token=valid_token,
    )


# =============================================================================
# Token Storage Fixtures
# =============================================================================


@pytest.fixture
def temp_token_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for token storage tests."""
    token_dir = tmp_path / ".gdrive-mcp"
    token_dir.mkdir(parents=True, mode=0o700)
    return token_dir


@pytest.fixture
def temp_token_path(temp_token_dir: Path) -> Path:
    """Get the path for a temporary tokens.json file."""
    return temp_token_dir / "tokens.json"


@pytest.fixture
def token_storage(temp_token_path: Path):
    """Create a TokenStorage instance with temporary storage."""
    from gdrive_mcp.auth.token_storage import TokenStorage

    return TokenStorage(token_path=temp_token_path)


# =============================================================================
# OAuth Manager Fixtures
# =============================================================================


@pytest.fixture
def oauth_manager(token_storage):
    """Create an OAuthManager with temporary storage."""
    from gdrive_mcp.auth.oauth_manager import OAuthManager

    return OAuthManager(storage=token_storage)


@pytest.fixture
def mock_google_credentials() -> MagicMock:
    """Create a mock Google OAuth2 Credentials object."""
    mock_creds = MagicMock()
    mock_creds.token = "mock_access_token"
    mock_creds.refresh_token = "mock_refresh_token"
    mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    mock_creds.expired = False
    mock_creds.valid = True
    mock_creds.scopes = ["https://www.googleapis.com/auth/documents"]
    return mock_creds


# =============================================================================
# Synthetic Docs API JSON
# =============================================================================


class DocJson:
    """Builds Docs API document JSON with consistent offsets.

    Paragraph text gets a trailing newline when it lacks one, matching how
    the API always ends a paragraph with its paragraph mark.
    """

    @staticmethod
    def run(content: str, start: int, style: dict[str, Any] | None = None) -> dict[str, Any]:
        return {
            "startIndex": start,
            "endIndex": start + len(content),
            "textRun": {"content": content, "textStyle": style or {}},
        }

    @classmethod
    def paragraph(
        cls,
        text: str,
        start: int,
        style: dict[str, Any] | None = None,
        named_style: str = "NORMAL_TEXT",
    ) -> dict[str, Any]:
        if not text.endswith("\n"):
            text += "\n"
        return cls.styled_paragraph([(text, style or {})], start, named_style)

    @classmethod
    def styled_paragraph(
        cls,
        runs: list[tuple[str, dict[str, Any]]],
        start: int,
        named_style: str = "NORMAL_TEXT",
    ) -> dict[str, Any]:
        """Paragraph from ``(content, textStyle)`` pairs laid out back to back."""
        elements = []
        offset = start
        for content, style in runs:
            elements.append(cls.run(content, offset, style))
            offset += len(content)
        return {
            "startIndex": start,
            "endIndex": offset,
            "paragraph": {
                "elements": elements,
                "paragraphStyle": {"namedStyleType": named_style},
            },
        }

    @classmethod
    def table(cls, rows: list[list[str]], start: int) -> dict[str, Any]:
        """Table whose cells each hold one paragraph of the given text."""
        row_start = start + 1
        raw_rows = []
        for texts in rows:
            cell_start = row_start + 1
            cells = []
            for text in texts:
                paragraph = cls.paragraph(text, cell_start + 1)
                cell_end = paragraph["endIndex"]
                cells.append(
                    {"startIndex": cell_start, "endIndex": cell_end, "content": [paragraph]}
                )
                cell_start = cell_end
            raw_rows.append({"startIndex": row_start, "endIndex": cell_start, "tableCells": cells})
            row_start = cell_start
        return {
            "startIndex": start,
            "endIndex": row_start + 1,
            "table": {
                "rows": len(rows),
                "columns": len(rows[0]) if rows else 0,
                "tableRows": raw_rows,
            },
        }

    @classmethod
    def body(cls, *texts: str) -> list[dict[str, Any]]:
        """Section break followed by one paragraph per text, starting at offset 1."""
        content: list[dict[str, Any]] = [{"endIndex": 1, "sectionBreak": {}}]
        offset = 1
        for text in texts:
            paragraph = cls.paragraph(text, offset)
            content.append(paragraph)
            offset = paragraph["endIndex"]
        return content

    @staticmethod
    def document(
        content: list[dict[str, Any]],
        title: str = "Test Document",
        document_id: str = "doc123",
    ) -> dict[str, Any]:
        return {"documentId": document_id, "title": title, "body": {"content": content}}

    @staticmethod
    def tab(
        tab_id: str,
        title: str,
        content: list[dict[str, Any]],
        index: int = 0,
        child_tabs: list[dict[str, Any]] | None = None,
        nesting_level: int = 0,
        parent_tab_id: str | None = None,
    ) -> dict[str, Any]:
        properties: dict[str, Any] = {
            "tabId": tab_id,
            "title": title,
            "index": index,
            "nestingLevel": nesting_level,
        }
        if parent_tab_id:
            properties["parentTabId"] = parent_tab_id
        return {
            "tabProperties": properties,
            "documentTab": {"body": {"content": content}},
            "childTabs": child_tabs or [],
        }

    @staticmethod
    def tabbed_document(
        tabs: list[dict[str, Any]],
        title: str = "Test Document",
        document_id: str = "doc123",
    ) -> dict[str, Any]:
        return {"documentId": document_id, "title": title, "tabs": tabs}


@pytest.fixture
def doc_json() -> type[DocJson]:
    """Builder for synthetic Docs API responses."""
    return DocJson


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
