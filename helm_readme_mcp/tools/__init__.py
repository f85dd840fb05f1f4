"""Tool implementations exposed by the MCP server."""

from helm_readme_mcp.tools.context import ToolContext
from helm_readme_mcp.tools.info import get_package_info
from helm_readme_mcp.tools.readme import get_package_readme
from helm_readme_mcp.tools.search import search_packages

__all__ = [
    "ToolContext",
    "get_package_info",
    "get_package_readme",
    "search_packages",
]
