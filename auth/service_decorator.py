"""
Per-call Google service injection for MCP tools.

`require_docs_gateway` builds fresh Docs and Drive clients for every tool
call and passes them to the tool wrapped in a DocsGateway. The `gateway`
parameter is removed from the tool's public signature so it never appears in
the MCP input schema.
"""

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, List

from auth.google_auth import get_credentials
from auth.scopes import resolve_scopes
from core import config
from gdocs.docs_gateway import DocsGateway
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

GATEWAY_PARAM = "gateway"


def _build_gateway(scopes: List[str]) -> DocsGateway:
    credentials = get_credentials(scopes)
    docs_service = build("docs", "v1", credentials=credentials, cache_discovery=False)
    drive_service = build("drive", "v3", credentials=credentials, cache_discovery=False)
    return DocsGateway(
        docs_service,
        drive_service,
        require_revision_match=config.DOCS_REQUIRE_REVISION_MATCH,
    )


async def get_docs_gateway(*scope_groups: str) -> DocsGateway:
    """Build a gateway outside a tool, e.g. for resources whose parameters come from a URI."""
    return await asyncio.to_thread(
        _build_gateway, resolve_scopes(list(scope_groups or ("docs_write", "drive")))
    )


def require_docs_gateway(*scope_groups: str) -> Callable:
    """
    Decorator that injects a DocsGateway as the tool's first argument.

    Args:
        scope_groups: Scope group names from auth.scopes, e.g. "docs_read", "drive"

    Usage:
        @require_docs_gateway("docs_read")
        async def read_doc(gateway: DocsGateway, document_id: str) -> str: ...
    """
    scopes = resolve_scopes(list(scope_groups or ("docs_write", "drive")))

    def decorator(func: Callable) -> Callable:
        original_sig = inspect.signature(func)
        if GATEWAY_PARAM not in original_sig.parameters:
            raise TypeError(f"{func.__name__} must accept a '{GATEWAY_PARAM}' parameter")
        public_params = [
            param for name, param in original_sig.parameters.items() if name != GATEWAY_PARAM
        ]

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            gateway = await asyncio.to_thread(_build_gateway, scopes)
            return await func(gateway, *args, **kwargs)

        wrapper.__signature__ = original_sig.replace(parameters=public_params)
        return wrapper

    return decorator
