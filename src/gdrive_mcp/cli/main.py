"""Command-line interface for gdrive-mcp."""

import asyncio
import sys

import click

from gdrive_mcp.__version__ import __version__


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Docs MCP Server - precise Google Docs editing over MCP.

    Tools cover:
    - Docs editing (insert, delete, formatting, find-and-replace)
    - Tables, images and tabs
    - Drive metadata and comments
    """
    pass


@main.command()
@click.option("--client-id", envvar="GOOGLE_OAUTH_CLIENT_ID", help="Google OAuth client ID")
@click.option(
    "--client-secret", envvar="GOOGLE_OAUTH_CLIENT_SECRET", help="Google OAuth client secret"
)
@click.option(
    "--scopes",
    envvar="GOOGLE_DRIVE_MCP_SCOPES",
    help="Comma-separated scope aliases, presets or URLs (default: all aliases)",
)
def setup(client_id: str | None, client_secret: str | None, scopes: str | None) -> None:
    """Set up Google OAuth authentication.

    This will:
    1. Open browser for OAuth2 consent flow
    2. Store refresh tokens at ./.gdrive-mcp/tokens.json
       (or GOOGLE_DRIVE_MCP_TOKEN_PATH)

    Requires:
    - GOOGLE_OAUTH_CLIENT_ID environment variable or --client-id option
    - GOOGLE_OAUTH_CLIENT_SECRET environment variable or --client-secret option
    """
    from gdrive_mcp.auth import OAuthManager, resolve_oauth_scopes

    manager = OAuthManager()

    if manager.has_valid_tokens():
        click.echo("✓ Already authenticated!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")

        if not click.confirm("Re-authenticate?"):
            return

    if not client_id or not client_secret:
        click.echo("❌ Error: OAuth client credentials required")
        click.echo("")
        click.echo("Set environment variables:")
        click.echo("  export GOOGLE_OAUTH_CLIENT_ID='your-client-id'")
        click.echo("  export GOOGLE_OAUTH_CLIENT_SECRET='your-client-secret'")
        click.echo("")
        click.echo("Or pass as options:")
        click.echo("  gdrive-mcp setup --client-id=... --client-secret=...")
        sys.exit(1)

    try:
        requested_scopes = resolve_oauth_scopes(scopes)
    except ValueError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)

    click.echo("Starting OAuth authentication flow...")
    click.echo(f"Requesting {len(requested_scopes)} scope(s)")
    click.echo("Browser will open for Google consent...")
    click.echo("")

    try:
        asyncio.run(
            manager.authenticate(
                scopes=requested_scopes, client_id=client_id, client_secret=client_secret
            )
        )
        click.echo("✓ Authentication successful!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")
        click.echo("Run 'gdrive-mcp doctor' to verify setup.")
    except Exception as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)


@main.command()
def mcp() -> None:
    """Start the MCP server on stdio.

    Authentication is required before starting the server.
    Run 'gdrive-mcp setup' if not already authenticated.
    """
    from gdrive_mcp.auth import OAuthManager, TokenStatus
    from gdrive_mcp.server import main as server_main

    manager = OAuthManager()
    status, _ = manager.get_status()

    if status == TokenStatus.MISSING:
        click.echo("❌ Not authenticated. Run 'gdrive-mcp setup' first.", err=True)
        sys.exit(1)

    if status == TokenStatus.INVALID:
        click.echo("❌ Token file corrupted. Run 'gdrive-mcp setup' to re-authenticate.", err=True)
        sys.exit(1)

    # stdout belongs to the MCP protocol from here on
    try:
        click.echo("Starting Google Docs MCP server...", err=True)
        server_main()
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ Server error: {e}", err=True)
        sys.exit(1)


@main.command()
def doctor() -> None:
    """Check installation and authentication status.

    Verifies:
    1. Python dependencies installed
    2. Token validity and granted scopes
    """
    from gdrive_mcp.auth import OAuthManager, TokenStatus

    click.echo("Google Docs MCP Status:")
    click.echo("")

    click.echo("Dependencies:")
    try:
        import google.auth  # noqa: F401
        import google_auth_oauthlib  # noqa: F401

        click.echo("  ✓ google-auth installed")
        click.echo("  ✓ google-auth-oauthlib installed")
    except ImportError as e:
        click.echo(f"  ❌ Missing dependency: {e}")
        sys.exit(1)

    click.echo("")

    manager = OAuthManager()
    status, stored = manager.get_status()

    click.echo("Authentication:")
    click.echo(f"  Token file: {manager.token_path}")

    if status == TokenStatus.MISSING:
        click.echo("  ❌ Not authenticated")
        click.echo("")
        click.echo("Run 'gdrive-mcp setup' to authenticate.")
        sys.exit(1)
    elif status == TokenStatus.INVALID:
        click.echo("  ❌ Token file corrupted")
        click.echo("")
        click.echo("Run 'gdrive-mcp setup' to re-authenticate.")
        sys.exit(1)
    elif status == TokenStatus.EXPIRED:
        click.echo("  ⚠️  Token expired (can be refreshed)")
    elif status == TokenStatus.VALID:
        click.echo("  ✓ Authenticated")
        if stored:
            click.echo(
                f"  Token expires: {stored.token.expires_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
            )

    if stored:
        click.echo(f"  Scopes: {len(stored.token.scopes)} configured")
        for scope in stored.token.scopes:
            click.echo(f"    - {scope}")

    click.echo("")
    click.echo("✓ Ready to use!")


@main.command()
def logout() -> None:
    """Remove the stored OAuth token."""
    from gdrive_mcp.auth import SERVICE_NAME, TokenStorage

    storage = TokenStorage()
    if storage.delete(SERVICE_NAME):
        click.echo(f"✓ Removed token for {SERVICE_NAME}")
    else:
        click.echo("No stored token found.")


if __name__ == "__main__":
    main()
