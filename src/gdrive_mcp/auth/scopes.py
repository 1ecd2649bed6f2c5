"""OAuth scope aliases and resolution from the environment.

Environment Variables:
    GOOGLE_DRIVE_MCP_SCOPES: Comma-separated scope aliases (``drive``,
        ``documents``...), preset names (``readonly``, ``content-editor``,
        ``full``) or full ``https://`` scope URLs. Empty means DEFAULT_SCOPES.
"""

import os

SCOPES_ENV_VAR = "GOOGLE_DRIVE_MCP_SCOPES"

SCOPE_ALIASES = {
    "drive": "https://www.googleapis.com/auth/drive",
    "drive.file": "https://www.googleapis.com/auth/drive.file",
    "drive.readonly": "https://www.googleapis.com/auth/drive.readonly",
    "documents": "https://www.googleapis.com/auth/documents",
    "spreadsheets": "https://www.googleapis.com/auth/spreadsheets",
    "presentations": "https://www.googleapis.com/auth/presentations",
    "calendar": "https://www.googleapis.com/auth/calendar",
    "calendar.events": "https://www.googleapis.com/auth/calendar.events",
}

SCOPE_PRESETS = {
    "readonly": ["drive.readonly"],
    "content-editor": ["drive.file", "documents", "spreadsheets", "presentations"],
    "full": ["drive", "documents", "spreadsheets", "presentations", "calendar", "calendar.events"],
}

DEFAULT_SCOPES = [SCOPE_ALIASES[alias] for alias in SCOPE_ALIASES]


def _expand(entry: str) -> list[str]:
    if entry in SCOPE_ALIASES:
        return [SCOPE_ALIASES[entry]]
    if entry in SCOPE_PRESETS:
        return [SCOPE_ALIASES[alias] for alias in SCOPE_PRESETS[entry]]
    if entry.startswith("https://"):
        return [entry]
    known = ", ".join(SCOPE_ALIASES)
    raise ValueError(
        f'Unknown OAuth scope alias "{entry}". '
        f"Use a full URL (https://...) or one of: {known}"
    )


def resolve_oauth_scopes(raw: str | None = None) -> list[str]:
    """Resolve the scopes to request during consent.

    Args:
        raw: Comma-separated scope list. Reads GOOGLE_DRIVE_MCP_SCOPES when None.

    Returns:
        Full scope URLs, de-duplicated in first-seen order.

    Raises:
        ValueError: If an entry is neither a known alias, a preset nor a URL.
    """
    if raw is None:
        raw = os.environ.get(SCOPES_ENV_VAR, "")
    raw = raw.strip()
    if not raw:
        return list(DEFAULT_SCOPES)

    scopes: list[str] = []
    for entry in (part.strip() for part in raw.split(",")):
        if entry:
            scopes.extend(_expand(entry))

    if not scopes:
        return list(DEFAULT_SCOPES)
    return list(dict.fromkeys(scopes))
