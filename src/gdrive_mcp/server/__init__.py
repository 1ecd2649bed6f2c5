"""MCP server implementation for Google Docs.

Docs editing tools:
- Insert and delete text by offset
- Character and paragraph formatting, addressed by offsets or by found text
- Find-and-replace with a dry-run preview
- Tables, cell editing and images from URLs
- Tabs: list, add, rename; smart chip inspection

Drive tools:
- List and search Google Docs, file metadata
- Comments: list, get, add (anchored), reply, delete

Transport: Stdio
Authentication: OAuth 2.0 with automatic token refresh
"""

from gdrive_mcp.server.google_drive_server import (
    GoogleDriveServer,
    main,
)


def create_server() -> GoogleDriveServer:
    """Create and configure a Google Docs MCP server.

    Returns:
        GoogleDriveServer: Configured server instance ready to run.

    Example:
        >>> server = create_server()
        >>> asyncio.run(server.run())
    """
    return GoogleDriveServer()


__all__ = ["create_server", "GoogleDriveServer", "main"]
