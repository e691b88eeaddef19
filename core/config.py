"""
Server configuration.

Values come from the environment. A `.env` file next to the project root is
loaded first, so local settings do not have to be exported by hand.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv

dotenv_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
load_dotenv(dotenv_path=dotenv_path)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}; using {default}")
        return default


GOOGLE_OAUTH_CLIENT_SECRETS = os.getenv("GOOGLE_OAUTH_CLIENT_SECRETS", "credentials.json")
GOOGLE_OAUTH_TOKEN_PATH = os.getenv("GOOGLE_OAUTH_TOKEN_PATH", "token.json")
GOOGLE_SERVICE_ACCOUNT_FILE: Optional[str] = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

WORKSPACE_MCP_PORT = _get_int("WORKSPACE_MCP_PORT", 8000)

# When enabled, every batch carries writeControl.requiredRevisionId so edits
# planned against a stale snapshot are rejected instead of misapplied.
DOCS_REQUIRE_REVISION_MATCH = _get_bool("DOCS_REQUIRE_REVISION_MATCH")
DOCS_SEARCH_PAGE_SIZE = _get_int("DOCS_SEARCH_PAGE_SIZE", 10)

VALID_TRANSPORTS = ("stdio", "streamable-http")

_transport_mode = os.getenv("WORKSPACE_MCP_TRANSPORT", "stdio")


def get_transport_mode() -> str:
    return _transport_mode


def set_transport_mode(mode: str) -> None:
    global _transport_mode
    if mode not in VALID_TRANSPORTS:
        raise ValueError(f"Unknown transport '{mode}'. Use one of: {', '.join(VALID_TRANSPORTS)}")
    _transport_mode = mode
