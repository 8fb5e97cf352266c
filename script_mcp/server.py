"""Script MCP FastMCP server.

Thin wrapper wiring the MCP tools to the reconciler. All business logic
lives in the services/ and tools/ modules.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from script_mcp.middleware import ErrorHandlingMiddleware
from script_mcp.services import get_reconciler, get_settings, get_store
from script_mcp.tools import (
    script_apply,
    script_delete,
    script_list,
    script_reconcile,
    script_status,
)
from script_mcp.utils.console import ColorfulFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the script_mcp package.

    Called at module load time so logging is set up before any loggers
    are used, regardless of how the server is started.
    """
    log_level = get_settings().log_level
    use_colors = os.getenv("SCRIPT_MCP_LOG_COLORS", "true").lower() != "false"

    # Disable colors if not a TTY
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("script_mcp")
    package_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Only add handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    # Suppress noisy third-party loggers
    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "asyncssh",
        "asyncssh.sftp",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


# Configure logging at module load time
_configure_logging()

logger = logging.getLogger(__name__)


async def list_scripts_resource() -> str:
    """List script resources and their readiness."""
    return await script_list()


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Start the periodic reconcile loop for the server's lifetime.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with the poll interval
    """
    settings = get_settings()
    reconciler = get_reconciler()
    logger.info("Script MCP server starting up")

    reconciler.start_polling(settings.poll_interval)
    logger.info("Script MCP server ready to accept connections")

    try:
        yield {"poll_interval": settings.poll_interval}
    finally:
        logger.info("Script MCP server shutting down")
        await reconciler.stop()
        store = get_store()
        if store.size > 0:
            logger.info(
                "Leaving %d script resource(s) unreconciled: %s",
                store.size,
                ", ".join(store.names()),
            )
        logger.info("Script MCP server shutdown complete")


def create_server() -> FastMCP:
    """Create and configure the MCP server.

    Returns:
        Configured FastMCP server instance.
    """
    settings = get_settings()
    server = FastMCP("script_mcp", lifespan=app_lifespan)

    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    logger.debug(
        "Middleware configured: ErrorHandling(traceback=%s)",
        settings.include_traceback,
    )

    server.tool()(script_apply)
    server.tool()(script_reconcile)
    server.tool()(script_status)
    server.tool()(script_delete)
    server.tool()(script_list)

    server.resource("scripts://list")(list_scripts_resource)

    # Add health check endpoint for HTTP transport
    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
