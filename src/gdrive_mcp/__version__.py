"""Version information for gdrive-mcp."""

from pathlib import Path


def _get_version() -> str:
    """Read the version from a VERSION file, falling back to a default."""
    for candidate in (
        Path(__file__).parent / "VERSION",
        Path(__file__).parent.parent.parent / "VERSION",
    ):
        if candidate.exists():
            return candidate.read_text().strip()
    return "0.1.0"


__version__ = _get_version()
