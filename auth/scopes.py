"""
Google OAuth scopes used by the Docs tools.

Tools ask for scopes by group name ("docs_read", "drive_file", ...) so the
decorators stay readable; SCOPES is what the consent screen requests.
"""

from typing import List

DOCS_READONLY_SCOPE = "https://www.googleapis.com/auth/documents.readonly"
DOCS_WRITE_SCOPE = "https://www.googleapis.com/auth/documents"
DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"

SCOPE_GROUPS = {
    "docs_read": [DOCS_READONLY_SCOPE],
    "docs_write": [DOCS_WRITE_SCOPE],
    "drive_read": [DRIVE_READONLY_SCOPE],
    "drive_file": [DRIVE_FILE_SCOPE],
    "drive": [DRIVE_SCOPE],
}

# Full Drive access is needed to search and delete documents the server did not create
SCOPES = [DOCS_WRITE_SCOPE, DRIVE_SCOPE]


def resolve_scopes(groups: List[str]) -> List[str]:
    """Expand scope group names into scope URLs, keeping order and dropping duplicates."""
    scopes: List[str] = []
    for group in groups:
        if group not in SCOPE_GROUPS:
            raise ValueError(f"Unknown scope group '{group}'")
        for scope in SCOPE_GROUPS[group]:
            if scope not in scopes:
                scopes.append(scope)
    return scopes
