"""MCP server shell: tool catalog, dispatch and transports."""

from helm_readme_mcp.server.app import create_app, create_mcp_server, serve_stdio
from helm_readme_mcp.server.handlers import TOOL_DEFINITIONS, ToolCallError, dispatch_tool

__all__ = [
    "TOOL_DEFINITIONS",
    "ToolCallError",
    "create_app",
    "create_mcp_server",
    "dispatch_tool",
    "serve_stdio",
]
