"""MCP server factory and the Starlette ASGI application for SSE."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server import Server as McpServer
from starlette.applications import Starlette

from helm_readme_mcp.constants import POST_MESSAGES_PATH, SERVER_NAME, SSE_PATH
from helm_readme_mcp.server.handlers import register_handlers
from helm_readme_mcp.server.transport import run_stdio, sse_routes
from helm_readme_mcp.tools import ToolContext

logger = logging.getLogger(__name__)


def create_mcp_server(ctx: ToolContext) -> McpServer:
    """Create the MCP server instance with every tool handler registered."""
    mcp_server = McpServer(SERVER_NAME)
    register_handlers(mcp_server, ctx)
    logger.debug("Underlying MCP server instance '%s' created.", mcp_server.name)
    return mcp_server


def create_app(ctx: ToolContext) -> Starlette:
    """Create and return the Starlette ASGI application (SSE transport)."""
    mcp_server = create_mcp_server(ctx)

    @asynccontextmanager
    async def app_lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info("Application startup...")
        await ctx.start()
        try:
            yield
        finally:
            logger.info("Application shutdown...")
            await ctx.close()

    application = Starlette(lifespan=app_lifespan, routes=sse_routes(mcp_server))
    logger.info(
        "Starlette ASGI app '%s' created. SSE GET on %s, POST on %s",
        SERVER_NAME,
        SSE_PATH,
        POST_MESSAGES_PATH,
    )
    return application


async def serve_stdio(ctx: ToolContext) -> None:
    """Run the server over stdio, starting and closing *ctx* around it."""
    mcp_server = create_mcp_server(ctx)
    await ctx.start()
    try:
        await run_stdio(mcp_server)
    finally:
        await ctx.close()
