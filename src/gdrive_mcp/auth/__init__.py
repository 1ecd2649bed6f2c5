"""OAuth authentication for the Google Docs MCP server.

Quick Start:
    ```python
    from gdrive_mcp.auth import OAuthManager

    manager = OAuthManager()
    token = await manager.authenticate(
        client_id="your-client-id",
        client_secret="your-client-secret"  # pragma: allowlist secret
    )
    ```
"""

from gdrive_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus
from gdrive_mcp.auth.oauth_manager import SERVICE_NAME, OAuthManager
from gdrive_mcp.auth.scopes import DEFAULT_SCOPES, SCOPE_ALIASES, resolve_oauth_scopes
from gdrive_mcp.auth.token_storage import TokenStorage

__all__ = [
    "DEFAULT_SCOPES",
    "OAuthManager",
    "OAuthToken",
    "SCOPE_ALIASES",
    "SERVICE_NAME",
    "StoredToken",
    "TokenMetadata",
    "TokenStatus",
    "TokenStorage",
    "resolve_oauth_scopes",
]
