"""
Helm README MCP - chart documentation lookups for MCP clients.

Exposes three read-only tools over the Artifact Hub registry API: fetch a
chart's README with extracted usage examples, fetch chart metadata, and
search charts.
"""

from helm_readme_mcp.constants import SERVER_NAME, SERVER_VERSION

__version__ = SERVER_VERSION
__app_name__ = SERVER_NAME

__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "__version__",
    "__app_name__",
]
