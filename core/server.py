import logging
from importlib import metadata

from starlette.requests import Request
from starlette.responses import JSONResponse

from fastmcp import FastMCP

from core.config import (
    LOG_LEVEL,
    get_transport_mode,
    set_transport_mode as _set_transport_mode,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# Suppress googleapiclient discovery cache warning
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

SERVER_NAME = "google_docs_markdown"

server = FastMCP(name=SERVER_NAME)


def get_server_version() -> str:
    try:
        return metadata.version("google-docs-markdown-mcp")
    except metadata.PackageNotFoundError:
        return "dev"


def set_transport_mode(mode: str):
    """Sets the transport mode for the server."""
    _set_transport_mode(mode)
    logger.info(f"Transport: {mode}")


@server.custom_route("/health", methods=["GET"])
async def health_check(request: Request):
    return JSONResponse(
        {
            "status": "healthy",
            "service": SERVER_NAME,
            "version": get_server_version(),
            "transport": get_transport_mode(),
        }
    )
