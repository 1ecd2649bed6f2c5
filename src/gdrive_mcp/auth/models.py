"""Pydantic models for persisted OAuth tokens."""

from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field


class TokenStatus(str, Enum):
    """State of the token stored for a service."""

    VALID = "valid"
    EXPIRED = "expired"
    MISSING = "missing"
    INVALID = "invalid"


class OAuthToken(BaseModel):
    """Access/refresh token pair as returned by Google's token endpoint.

    Attributes:
        access_token: Bearer token sent with API calls.
        refresh_token: Long-lived token used to mint new access tokens.
        expires_at: Timezone-aware expiry of the access token.
        scopes: Scopes granted to the token.
        token_type: Always "Bearer" for Google.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime
    scopes: list[str] = Field(default_factory=list)
    token_type: str = "Bearer"

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Return True if the token expires within ``buffer_seconds``."""
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds) >= expires_at


class TokenMetadata(BaseModel):
    service_name: str
    provider: str = "google"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_refreshed: datetime | None = None


class StoredToken(BaseModel):
    """Versioned on-disk envelope for one service's token."""

    version: int = 1
    metadata: TokenMetadata
    token: OAuthToken
