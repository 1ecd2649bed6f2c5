"""OAuth2 consent and refresh for the Google Docs/Drive tools.

Environment Variables:
    GOOGLE_OAUTH_CLIENT_ID: Google OAuth client ID
    GOOGLE_OAUTH_CLIENT_SECRET: Google OAuth client secret
    GOOGLE_OAUTH_REDIRECT_URI: Local callback (default: http://127.0.0.1:8789/callback).
        Only its host and port are used; the consent flow serves the callback itself.
    GOOGLE_DRIVE_MCP_SCOPES: Scope aliases to request (see gdrive_mcp.auth.scopes).
"""

import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gdrive_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus
from gdrive_mcp.auth.scopes import resolve_oauth_scopes
from gdrive_mcp.auth.token_storage import TokenStorage

logger = logging.getLogger(__name__)

SERVICE_NAME = "gdrive-mcp"

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105

DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"


class OAuthManager:
    """Runs the consent flow and keeps the stored token fresh.

    Attributes:
        storage: Token storage the credentials are persisted to.

    Example:
        ```python
        manager = OAuthManager()
        token = await manager.authenticate(client_id=..., client_secret=...)

        # later, from the server
        token = await manager.refresh_if_needed()
        ```
    """

    def __init__(
        self, storage: TokenStorage | None = None, service_name: str = SERVICE_NAME
    ) -> None:
        self.storage = storage or TokenStorage()
        self._service_name = service_name

    @property
    def token_path(self) -> Path:
        return self.storage.token_path

    def has_valid_tokens(self) -> bool:
        return self.storage.get_status(self._service_name) == TokenStatus.VALID

    def _credentials_to_token(self, credentials: Credentials, scopes: list[str]) -> OAuthToken:
        """Convert google-auth Credentials to our token model.

        google-auth reports naive UTC expiry times; they are made aware here.
        A missing expiry is treated as the usual one hour.
        """
        if credentials.expiry:
            expires_at = credentials.expiry
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(hours=1)

        return OAuthToken(  # nosec B106
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expires_at=expires_at,
            scopes=scopes,
            token_type="Bearer",
        )

    def _token_to_credentials(
        self,
        token: OAuthToken,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> Credentials:
        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=client_id or os.environ.get("GOOGLE_OAUTH_CLIENT_ID"),
            client_secret=client_secret or os.environ.get("GOOGLE_OAUTH_CLIENT_SECRET"),
            scopes=token.scopes,
        )

    @staticmethod
    def _client_config(client_id: str, client_secret: str) -> dict[str, Any]:
        return {
            "installed": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
            }
        }

    async def authenticate(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> OAuthToken:
        """Run the browser consent flow and store the resulting token.

        Args:
            scopes: Scopes to request; resolved from GOOGLE_DRIVE_MCP_SCOPES if omitted.
            client_id: OAuth client ID.
            client_secret: OAuth client secret.

        Returns:
            The newly stored token.

        Raises:
            ValueError: If the client ID or secret is missing, or a scope alias is unknown.
        """
        if scopes is None:
            scopes = resolve_oauth_scopes()

        if not client_id or not client_secret:
            raise ValueError(
                "Client ID and secret required. "
                "Pass as arguments or set GOOGLE_OAUTH_CLIENT_ID and "
                "GOOGLE_OAUTH_CLIENT_SECRET environment variables."
            )

        redirect_uri = os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)
        client_config = self._client_config(client_id, client_secret)

        loop = asyncio.get_running_loop()
        credentials = await loop.run_in_executor(
            None, self._run_oauth_flow, client_config, scopes, redirect_uri
        )

        token = self._credentials_to_token(credentials, scopes)
        metadata = TokenMetadata(service_name=self._service_name, provider="google")
        self.storage.store(self._service_name, token, metadata)
        logger.info(f"Stored OAuth token for {self._service_name} at {self.token_path}")

        return token

    def _run_oauth_flow(
        self, client_config: dict[str, Any], scopes: list[str], redirect_uri: str
    ) -> Credentials:
        """Open the consent page and wait for the local callback (blocking)."""
        parsed = urlparse(redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT

        flow = InstalledAppFlow.from_client_config(client_config, scopes=scopes)
        return flow.run_local_server(
            host=host,
            port=port,
            open_browser=True,
            authorization_prompt_message="Opening browser for Google authorization...\n{url}",
            success_message="Authentication successful. You can close this window.",
            access_type="offline",
            prompt="consent",
        )

    async def refresh_if_needed(self) -> OAuthToken | None:
        """Refresh the stored token if it is expired or about to expire.

        Returns:
            The refreshed (or still valid) token, or None if there is no
            token or it cannot be refreshed.
        """
        stored = self.storage.retrieve(self._service_name)
        if stored is None:
            return None

        if not stored.token.is_expired():
            return stored.token

        if stored.token.refresh_token is None:
            logger.warning("Token expired and no refresh token is stored")
            return None

        credentials = self._token_to_credentials(stored.token)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, credentials.refresh, Request())

        new_token = self._credentials_to_token(credentials, stored.token.scopes)
        if new_token.refresh_token is None:
            new_token.refresh_token = stored.token.refresh_token

        stored.metadata.last_refreshed = datetime.now(timezone.utc)
        self.storage.store(self._service_name, new_token, stored.metadata)
        logger.info("Refreshed OAuth access token")

        return new_token

    def get_status(self) -> tuple[TokenStatus, StoredToken | None]:
        """Return the token status and the stored token, if any."""
        status = self.storage.get_status(self._service_name)
        stored = (
            self.storage.retrieve(self._service_name) if status != TokenStatus.MISSING else None
        )
        return (status, stored)

    def get_credentials(self) -> Credentials | None:
        stored = self.storage.retrieve(self._service_name)
        if stored is None:
            return None
        return self._token_to_credentials(stored.token)
