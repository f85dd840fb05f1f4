"""stdio and SSE transport handling for MCP connections."""

import logging
from typing import List

from mcp.server import Server as McpServer
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import BaseRoute, Mount, Route

from helm_readme_mcp.constants import POST_MESSAGES_PATH, SERVER_NAME, SERVER_VERSION, SSE_PATH

logger = logging.getLogger(__name__)


def init_options(mcp_server: McpServer) -> InitializationOptions:
    return InitializationOptions(
        server_name=SERVER_NAME,
        server_version=SERVER_VERSION,
        capabilities=mcp_server.get_capabilities(NotificationOptions(), {}),
    )


async def run_stdio(mcp_server: McpServer) -> None:
    """Serve a single MCP session over stdin/stdout until EOF."""
    logger.info("Starting MCP server '%s' on stdio", SERVER_NAME)
    async with stdio_server() as (read_stream, write_stream):
        await mcp_server.run(read_stream, write_stream, init_options(mcp_server))
    logger.info("stdio session closed")


def sse_routes(mcp_server: McpServer) -> List[BaseRoute]:
    """Routes for the SSE transport: ``GET /sse`` and ``POST /messages/``."""
    sse_transport = SseServerTransport(POST_MESSAGES_PATH)

    async def handle_sse(request: Request) -> Response:
        logger.debug("Received new SSE connection request (GET): %s", request.url)
        async with sse_transport.connect_sse(
            request.scope,
            request.receive,
            request._send,
        ) as (read_stream, write_stream):
            await mcp_server.run(read_stream, write_stream, init_options(mcp_server))
        logger.debug("SSE connection closed: %s", request.url)
        return Response()

    return [
        Route(SSE_PATH, endpoint=handle_sse),
        Mount(POST_MESSAGES_PATH, app=sse_transport.handle_post_message),
    ]
