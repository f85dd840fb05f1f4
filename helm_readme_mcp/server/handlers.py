"""MCP handler functions - registered on the MCP server instance."""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping

from mcp import types as mcp_types
from mcp.server import Server as McpServer

from helm_readme_mcp.errors import HelmReadmeError, NetworkError, ValidationError
from helm_readme_mcp.models import dump
from helm_readme_mcp.tools import (
    ToolContext,
    get_package_info,
    get_package_readme,
    search_packages,
)
from helm_readme_mcp.tools.validators import validate_boolean

logger = logging.getLogger(__name__)

README_TOOL_NAME = "get_readme_from_helm"
INFO_TOOL_NAME = "get_package_info_from_helm"
SEARCH_TOOL_NAME = "search_packages_from_helm"

_PACKAGE_NAME_PROPERTY = {
    "type": "string",
    "description": 'The name of the Helm chart in format "repo/chart"',
}

TOOL_DEFINITIONS: List[mcp_types.Tool] = [
    mcp_types.Tool(
        name=README_TOOL_NAME,
        description="Get Helm chart README and usage examples from Artifact Hub",
        inputSchema={
            "type": "object",
            "properties": {
                "package_name": _PACKAGE_NAME_PROPERTY,
                "version": {
                    "type": "string",
                    "description": 'The version of the chart (default: "latest")',
                    "default": "latest",
                },
                "include_examples": {
                    "type": "boolean",
                    "description": "Whether to include usage examples (default: true)",
                    "default": True,
                },
            },
            "required": ["package_name"],
        },
    ),
    mcp_types.Tool(
        name=INFO_TOOL_NAME,
        description="Get Helm chart basic information and dependencies from Artifact Hub",
        inputSchema={
            "type": "object",
            "properties": {
                "package_name": _PACKAGE_NAME_PROPERTY,
                "include_dependencies": {
                    "type": "boolean",
                    "description": "Whether to include dependencies (default: true)",
                    "default": True,
                },
                "include_dev_dependencies": {
                    "type": "boolean",
                    "description": "Whether to include development dependencies (default: false)",
                    "default": False,
                },
            },
            "required": ["package_name"],
        },
    ),
    mcp_types.Tool(
        name=SEARCH_TOOL_NAME,
        description="Search for Helm charts in Artifact Hub",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query"},
                "limit": {
                    "type": "number",
                    "description": "Maximum number of results to return (default: 20)",
                    "default": 20,
                    "minimum": 1,
                    "maximum": 250,
                },
                "quality": {
                    "type": "number",
                    "description": "Minimum quality score (0-1) - not used in Artifact Hub",
                    "minimum": 0,
                    "maximum": 1,
                },
                "popularity": {
                    "type": "number",
                    "description": "Minimum popularity score (0-1) - not used in Artifact Hub",
                    "minimum": 0,
                    "maximum": 1,
                },
            },
            "required": ["query"],
        },
    ),
]


class ToolCallError(Exception):
    """Raised out of ``call_tool`` so the SDK marks the result ``isError``.

    The exception text is the JSON error payload the client receives.
    """

    def __init__(self, error: HelmReadmeError):
        self.error = error
        self.payload = {"error": error.to_dict()}
        super().__init__(json.dumps(self.payload, indent=2))


# ── argument checks ─────────────────────────────────────────────────────


def _require_str(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if not value or not isinstance(value, str):
        raise ValidationError(f"{key} is required and must be a string", field=key)
    return value


def _optional(args: Mapping[str, Any], key: str, kind: type, label: str) -> Any:
    if key not in args or args[key] is None:
        return None
    value = args[key]
    if kind is bool:
        validate_boolean(value, key)
        return value
    # bool is an int subclass; reject it where a number or string is wanted.
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be {label}", field=key)
    if not isinstance(value, kind):
        raise ValidationError(f"{key} must be {label}", field=key)
    return value


def _number_in_range(args: Mapping[str, Any], key: str, low: float, high: float) -> Any:
    value = _optional(args, key, (int, float), "a number")  # type: ignore[arg-type]
    if value is not None and not low <= value <= high:
        raise ValidationError(f"{key} must be a number between {low:g} and {high:g}", field=key)
    return value


def readme_params(args: Mapping[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"package_name": _require_str(args, "package_name")}
    version = _optional(args, "version", str, "a string")
    if version is not None:
        params["version"] = version
    include_examples = _optional(args, "include_examples", bool, "a boolean")
    if include_examples is not None:
        params["include_examples"] = include_examples
    return params


def info_params(args: Mapping[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"package_name": _require_str(args, "package_name")}
    for key in ("include_dependencies", "include_dev_dependencies"):
        value = _optional(args, key, bool, "a boolean")
        if value is not None:
            params[key] = value
    return params


def search_params(args: Mapping[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"query": _require_str(args, "query")}
    limit = _number_in_range(args, "limit", 1, 250)
    if limit is not None:
        params["limit"] = limit
    for key in ("quality", "popularity"):
        score = _number_in_range(args, key, 0, 1)
        if score is not None:
            params[key] = score
    return params


_TOOLS: Dict[str, tuple] = {
    README_TOOL_NAME: (readme_params, get_package_readme),
    INFO_TOOL_NAME: (info_params, get_package_info),
    SEARCH_TOOL_NAME: (search_params, search_packages),
}


# ── dispatch ────────────────────────────────────────────────────────────


async def dispatch_tool(ctx: ToolContext, name: str, arguments: Any) -> Dict[str, Any]:
    """Validate *arguments*, run tool *name* and return its JSON payload.

    Raises :class:`HelmReadmeError` subclasses for every failure.
    """
    entry = _TOOLS.get(name)
    if entry is None:
        raise HelmReadmeError(f"Unknown tool: {name}", "UNKNOWN_TOOL", 404)
    if not isinstance(arguments, Mapping):
        raise ValidationError("Arguments must be an object")

    to_params, tool_fn = entry
    tool: Callable[..., Awaitable[Any]] = tool_fn
    result = await tool(ctx, **to_params(arguments))
    return dump(result)


def register_handlers(mcp_server: McpServer, ctx: ToolContext) -> None:
    """Register the tool handlers on the server instance."""

    @mcp_server.list_tools()
    async def handle_list_tools() -> List[mcp_types.Tool]:
        logger.debug("Handling listTools request...")
        return list(TOOL_DEFINITIONS)

    @mcp_server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[mcp_types.TextContent]:
        logger.debug("Handling callTool: name='%s'", name)
        try:
            payload = await dispatch_tool(ctx, name, arguments)
        except HelmReadmeError as exc:
            logger.warning("Tool '%s' failed: [%s] %s", name, exc.code, exc.message)
            raise ToolCallError(exc) from exc
        except Exception as exc:
            # (final handler boundary - this IS the error handler)
            logger.error("Tool '%s' raised unexpectedly: %s", name, exc, exc_info=True)
            raise ToolCallError(NetworkError(f"Unexpected error: {exc}", orig_exc=exc)) from exc

        return [mcp_types.TextContent(type="text", text=json.dumps(payload, indent=2))]
