import argparse
import logging
import sys

from core import config
from core.server import server, set_transport_mode
from auth.google_auth import check_client_secrets

logger = logging.getLogger(__name__)


def main():
    """
    Main entry point for the Google Docs Markdown MCP server.
    Registers the Docs tools, resources and prompts, then runs the selected transport.
    """
    parser = argparse.ArgumentParser(description="Google Docs Markdown MCP Server")
    parser.add_argument(
        "--transport",
        choices=config.VALID_TRANSPORTS,
        default=config.get_transport_mode(),
        help="Transport mode: stdio (default) or streamable-http",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.WORKSPACE_MCP_PORT,
        help="Port for streamable-http transport (default: WORKSPACE_MCP_PORT or 8000)",
    )
    args = parser.parse_args()

    # Import tool modules to register them with the MCP server via decorators
    import gdocs.docs_tools  # noqa: F401
    import gdocs.docs_prompts  # noqa: F401

    set_transport_mode(args.transport)

    secrets_error = check_client_secrets()
    if secrets_error:
        logger.warning(secrets_error)

    try:
        if args.transport == "streamable-http":
            logger.info(f"Starting Google Docs MCP server on port {args.port}")
            server.run(transport="streamable-http", host="0.0.0.0", port=args.port)
        else:
            logger.info("Starting Google Docs MCP server on stdio")
            server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)


if __name__ == "__main__":
    main()
