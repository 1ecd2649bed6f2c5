"""Google Docs editing tools exposed over the Model Context Protocol."""

from gdrive_mcp.__version__ import __version__

__all__ = ["__version__"]
