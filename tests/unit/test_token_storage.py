"""Unit tests for the JSON token store."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from gdrive_mcp.auth.models import OAuthToken, TokenMetadata, TokenStatus
from gdrive_mcp.auth.oauth_manager import SERVICE_NAME
from gdrive_mcp.auth.token_storage import TOKEN_PATH_ENV_VAR, TokenStorage, get_token_path


def _metadata(service_name: str = SERVICE_NAME) -> TokenMetadata:
    return TokenMetadata(service_name=service_name)


@pytest.mark.unit
class TestTokenLocation:
    """Tests for where the token file lives."""

    def test_should_default_to_project_directory(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Verify tokens default to ./.gdrive-mcp/tokens.json with a private directory."""
        monkeypatch.delenv(TOKEN_PATH_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)

        storage = TokenStorage()

        assert storage.token_path == Path.cwd() / ".gdrive-mcp" / "tokens.json"
        assert storage.token_path.parent.stat().st_mode & 0o777 == 0o700

    def test_should_honour_token_path_override(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Verify GOOGLE_DRIVE_MCP_TOKEN_PATH replaces the default location."""
        override = tmp_path / "elsewhere" / "creds.json"
        monkeypatch.setenv(TOKEN_PATH_ENV_VAR, str(override))

        assert get_token_path() == override
        assert TokenStorage().token_path == override
        assert override.parent.exists()

    def test_should_tighten_existing_directory(self, tmp_path: Path) -> None:
        """Verify a world-readable token directory is restricted to the owner."""
        creds_dir = tmp_path / "shared"
        creds_dir.mkdir(mode=0o755)

        TokenStorage(token_path=creds_dir / "tokens.json")

        assert creds_dir.stat().st_mode & 0o777 == 0o700


@pytest.mark.unit
class TestStoreAndRetrieve:
    """Tests for writing and reading tokens."""

    def test_should_write_versioned_entry_with_private_permissions(
        self, token_storage: TokenStorage, valid_token: OAuthToken
    ) -> None:
        """Verify the file holds a version 1 entry keyed by service and is mode 0600."""
        token_storage.store(SERVICE_NAME, valid_token, _metadata())

        data = json.loads(token_storage.token_path.read_text())
        assert data[SERVICE_NAME]["version"] == 1
        assert data[SERVICE_NAME]["metadata"]["service_name"] == SERVICE_NAME
        assert data[SERVICE_NAME]["token"]["access_token"] == valid_token.access_token
        assert token_storage.token_path.stat().st_mode & 0o777 == 0o600

    def test_should_round_trip_token_fields(self, token_storage: TokenStorage) -> None:
        """Verify scopes, expiry and token type survive storage."""
        original = OAuthToken(
            access_token="ya29.docs",
            refresh_token="1//refresh",
            expires_at=datetime(2031, 6, 30, 8, 0, tzinfo=timezone.utc),
            scopes=[
                "https://www.googleapis.com/auth/documents",
                "https://www.googleapis.com/auth/drive.file",
            ],
        )

        token_storage.store(SERVICE_NAME, original, _metadata())
        retrieved = token_storage.retrieve(SERVICE_NAME)

        assert retrieved is not None
        assert retrieved.token == original

    def test_should_keep_token_without_refresh_token(self, token_storage: TokenStorage) -> None:
        """Verify access-only tokens are stored as-is."""
        token = OAuthToken(
            access_token="access_only",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            scopes=["https://www.googleapis.com/auth/documents"],
        )

        token_storage.store(SERVICE_NAME, token, _metadata())

        assert token_storage.retrieve(SERVICE_NAME).token.refresh_token is None

    def test_should_replace_previous_token(
        self, token_storage: TokenStorage, valid_token: OAuthToken
    ) -> None:
        """Verify re-authentication overwrites the stored token."""
        token_storage.store(SERVICE_NAME, valid_token, _metadata())
        replacement = valid_token.model_copy(update={"access_token": "rotated"})

        token_storage.store(SERVICE_NAME, replacement, _metadata())

        assert token_storage.retrieve(SERVICE_NAME).token.access_token == "rotated"
        assert token_storage.list_services() == [SERVICE_NAME]

    def test_should_keep_services_separate(
        self, token_storage: TokenStorage, valid_token: OAuthToken
    ) -> None:
        """Verify entries for other services are untouched by writes and deletes."""
        token_storage.store("other-tool", valid_token, _metadata("other-tool"))
        token_storage.store(SERVICE_NAME, valid_token, _metadata())

        assert token_storage.list_services() == [SERVICE_NAME, "other-tool"]

        assert token_storage.delete(SERVICE_NAME) is True
        assert token_storage.retrieve(SERVICE_NAME) is None
        assert token_storage.retrieve("other-tool") is not None

    def test_should_report_missing_entries(self, token_storage: TokenStorage) -> None:
        """Verify absent services read as None and cannot be deleted."""
        assert token_storage.retrieve(SERVICE_NAME) is None
        assert token_storage.delete(SERVICE_NAME) is False
        assert token_storage.list_services() == []


@pytest.mark.unit
class TestUnreadableFiles:
    """Tests for damaged or unreadable token files."""

    @pytest.mark.parametrize(
        "content",
        ["", "not valid json {{{", '["not", "a", "mapping"]'],
        ids=["empty", "malformed", "not-a-mapping"],
    )
    def test_should_treat_unparseable_file_as_empty(
        self, token_storage: TokenStorage, content: str
    ) -> None:
        """Verify files that are not a JSON object hold no tokens."""
        token_storage.token_path.write_text(content)

        assert token_storage.retrieve(SERVICE_NAME) is None
        assert token_storage.list_services() == []
        assert token_storage.get_status(SERVICE_NAME) == TokenStatus.MISSING

    def test_should_reject_malformed_entry(self, token_storage: TokenStorage) -> None:
        """Verify an entry that is not a stored token is reported INVALID."""
        token_storage.token_path.write_text(json.dumps({SERVICE_NAME: {"bad": "data"}}))

        assert token_storage.retrieve(SERVICE_NAME) is None
        assert token_storage.get_status(SERVICE_NAME) == TokenStatus.INVALID

    def test_should_survive_os_error_on_read(self, token_storage: TokenStorage) -> None:
        """Verify read failures are logged and treated as no tokens."""
        token_storage.token_path.write_text("{}")

        with patch("builtins.open", side_effect=OSError("Permission denied")):
            assert token_storage._load_tokens() == {}


@pytest.mark.unit
class TestStatusAndClear:
    """Tests for status classification and clearing."""

    def test_should_classify_token_status(
        self,
        token_storage: TokenStorage,
        valid_token: OAuthToken,
        expired_token: OAuthToken,
    ) -> None:
        """Verify VALID, EXPIRED and MISSING statuses."""
        assert token_storage.get_status(SERVICE_NAME) == TokenStatus.MISSING

        token_storage.store(SERVICE_NAME, valid_token, _metadata())
        assert token_storage.get_status(SERVICE_NAME) == TokenStatus.VALID

        token_storage.store(SERVICE_NAME, expired_token, _metadata())
        assert token_storage.get_status(SERVICE_NAME) == TokenStatus.EXPIRED

    def test_should_remove_file_on_clear(
        self, token_storage: TokenStorage, valid_token: OAuthToken
    ) -> None:
        """Verify clear_all deletes the file and tolerates a second call."""
        token_storage.store(SERVICE_NAME, valid_token, _metadata())

        token_storage.clear_all()
        token_storage.clear_all()

        assert not token_storage.token_path.exists()
        assert token_storage.list_services() == []
