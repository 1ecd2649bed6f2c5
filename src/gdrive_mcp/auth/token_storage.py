"""JSON-backed OAuth token storage.

Storage Location: ./.gdrive-mcp/tokens.json (project level), or the path in
GOOGLE_DRIVE_MCP_TOKEN_PATH when set.

Tokens live next to the project because the OAuth client credentials do
too, so separate projects can be connected to separate Google accounts.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from gdrive_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus

logger = logging.getLogger(__name__)

TOKEN_PATH_ENV_VAR = "GOOGLE_DRIVE_MCP_TOKEN_PATH"
CREDENTIALS_DIR_NAME = ".gdrive-mcp"


def get_token_path() -> Path:
    """Return the token file path, honouring GOOGLE_DRIVE_MCP_TOKEN_PATH."""
    override = os.environ.get(TOKEN_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / CREDENTIALS_DIR_NAME / "tokens.json"


class TokenStorage:
    """Per-service OAuth tokens in one JSON file.

    The directory is created 0700 and the file written 0600. Entries are
    keyed by service name and hold a serialized StoredToken.

    Attributes:
        token_path: Path to the tokens.json file.
    """

    def __init__(self, token_path: Path | None = None) -> None:
        self.token_path = token_path or get_token_path()
        self._ensure_credentials_dir()

    def _ensure_credentials_dir(self) -> None:
        creds_dir = self.token_path.parent
        if not creds_dir.exists():
            creds_dir.mkdir(parents=True, mode=0o700)
        else:
            creds_dir.chmod(0o700)

    def _load_tokens(self) -> dict[str, Any]:
        if not self.token_path.exists():
            return {}

        try:
            with open(self.token_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read token file {self.token_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_tokens(self, tokens: dict[str, Any]) -> None:
        self._ensure_credentials_dir()
        with open(self.token_path, "w") as f:
            json.dump(tokens, f, indent=2, default=str)
        self.token_path.chmod(0o600)

    def store(self, service_name: str, token: OAuthToken, metadata: TokenMetadata) -> None:
        """Store (or replace) the token for ``service_name``."""
        stored_token = StoredToken(version=1, metadata=metadata, token=token)
        tokens = self._load_tokens()
        tokens[service_name] = json.loads(stored_token.model_dump_json())
        self._save_tokens(tokens)
        logger.debug(f"Stored token for {service_name} at {self.token_path}")

    def retrieve(self, service_name: str) -> StoredToken | None:
        """Return the stored token, or None if absent or unparseable."""
        tokens = self._load_tokens()
        if service_name not in tokens:
            return None

        try:
            return StoredToken.model_validate(tokens[service_name])
        except ValueError:
            return None

    def delete(self, service_name: str) -> bool:
        """Delete a token; returns False if there was none."""
        tokens = self._load_tokens()
        if service_name not in tokens:
            return False

        del tokens[service_name]
        self._save_tokens(tokens)
        return True

    def list_services(self) -> list[str]:
        return sorted(self._load_tokens().keys())

    def get_status(self, service_name: str) -> TokenStatus:
        """Classify the stored token as valid, expired, missing or invalid."""
        stored = self.retrieve(service_name)

        if stored is None:
            if service_name in self._load_tokens():
                return TokenStatus.INVALID
            return TokenStatus.MISSING

        if stored.token.is_expired():
            return TokenStatus.EXPIRED

        return TokenStatus.VALID

    def clear_all(self) -> None:
        """Remove the token file entirely."""
        if self.token_path.exists():
            self.token_path.unlink()
