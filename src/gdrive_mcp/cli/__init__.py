"""Command-line interface for gdrive-mcp."""
