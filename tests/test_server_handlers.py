"""Tests for tool definitions, argument checks and dispatch."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp import types as mcp_types
from mcp.server import Server as McpServer

from helm_readme_mcp.cache import TTLCache
from helm_readme_mcp.errors import HelmReadmeError, PackageNotFoundError, ValidationError
from helm_readme_mcp.registry.models import PackageRecord, SearchPage
from helm_readme_mcp.server.app import create_app, create_mcp_server
from helm_readme_mcp.server.handlers import (
    INFO_TOOL_NAME,
    README_TOOL_NAME,
    SEARCH_TOOL_NAME,
    TOOL_DEFINITIONS,
    ToolCallError,
    dispatch_tool,
    info_params,
    readme_params,
    register_handlers,
    search_params,
)
from helm_readme_mcp.tools import ToolContext

RECORD = {
    "name": "redis",
    "version": "18.1.0",
    "description": "Redis in-memory store",
    "repository": {"name": "bitnami", "url": "https://charts.bitnami.com/bitnami"},
    "created_at": 0,
}


def _ctx() -> ToolContext:
    artifacthub = MagicMock()
    artifacthub.get_package_info = AsyncMock(return_value=PackageRecord.from_dict(RECORD))
    artifacthub.get_package_values = AsyncMock(return_value=None)
    artifacthub.search_packages = AsyncMock(return_value=SearchPage.from_dict({"packages": [RECORD]}))
    github = MagicMock()
    github.get_readme_content = AsyncMock(return_value=None)
    return ToolContext(cache=TTLCache(), artifacthub=artifacthub, github=github)


class TestToolDefinitions:
    def test_names(self):
        assert [t.name for t in TOOL_DEFINITIONS] == [
            "get_readme_from_helm",
            "get_package_info_from_helm",
            "search_packages_from_helm",
        ]

    def test_required_arguments(self):
        required = {t.name: t.inputSchema["required"] for t in TOOL_DEFINITIONS}
        assert required == {
            README_TOOL_NAME: ["package_name"],
            INFO_TOOL_NAME: ["package_name"],
            SEARCH_TOOL_NAME: ["query"],
        }

    def test_search_limit_bounds(self):
        search = next(t for t in TOOL_DEFINITIONS if t.name == SEARCH_TOOL_NAME)
        limit = search.inputSchema["properties"]["limit"]
        assert (limit["minimum"], limit["maximum"], limit["default"]) == (1, 250, 20)


class TestArgumentChecks:
    def test_readme_defaults_left_to_tool(self):
        assert readme_params({"package_name": "bitnami/redis"}) == {"package_name": "bitnami/redis"}

    def test_readme_all(self):
        args = {"package_name": "bitnami/redis", "version": "1.0.0", "include_examples": False}
        assert readme_params(args) == args

    def test_null_optional_ignored(self):
        assert info_params({"package_name": "a/b", "include_dependencies": None}) == {"package_name": "a/b"}

    @pytest.mark.parametrize(
        "builder, args, field",
        [
            (readme_params, {}, "package_name"),
            (readme_params, {"package_name": 42}, "package_name"),
            (readme_params, {"package_name": "a/b", "version": 1}, "version"),
            (readme_params, {"package_name": "a/b", "include_examples": "yes"}, "include_examples"),
            (readme_params, {"package_name": "a/b", "include_examples": 1}, "include_examples"),
            (info_params, {"package_name": "a/b", "include_dependencies": "false"}, "include_dependencies"),
            (info_params, {"package_name": "a/b", "include_dev_dependencies": 0}, "include_dev_dependencies"),
            (search_params, {"query": ""}, "query"),
            (search_params, {"query": "nginx", "limit": "10"}, "limit"),
            (search_params, {"query": "nginx", "limit": True}, "limit"),
            (search_params, {"query": "nginx", "limit": 251}, "limit"),
            (search_params, {"query": "nginx", "quality": 1.5}, "quality"),
            (search_params, {"query": "nginx", "popularity": -0.1}, "popularity"),
        ],
    )
    def test_rejected(self, builder, args, field):
        with pytest.raises(ValidationError) as exc_info:
            builder(args)
        assert exc_info.value.field == field

    def test_boolean_message(self):
        with pytest.raises(ValidationError, match="include_examples must be a boolean"):
            readme_params({"package_name": "a/b", "include_examples": 0})

    def test_search_numbers_passed_through(self):
        args = {"query": "nginx", "limit": 5.0, "quality": 0, "popularity": 1}
        assert search_params(args) == args


class TestDispatchTool:
    @pytest.mark.anyio
    async def test_readme(self):
        payload = await dispatch_tool(_ctx(), README_TOOL_NAME, {"package_name": "bitnami/redis"})
        assert payload["exists"] is True
        assert payload["installation"]["command"] == "helm install my-redis bitnami/redis"
        json.dumps(payload)

    @pytest.mark.anyio
    async def test_info_not_found_is_a_result(self):
        ctx = _ctx()
        ctx.artifacthub.get_package_info = AsyncMock(side_effect=PackageNotFoundError("bitnami/none"))
        payload = await dispatch_tool(ctx, INFO_TOOL_NAME, {"package_name": "bitnami/none"})
        assert payload["exists"] is False

    @pytest.mark.anyio
    async def test_search(self):
        payload = await dispatch_tool(_ctx(), SEARCH_TOOL_NAME, {"query": "redis", "limit": 3})
        assert payload["total"] == 1
        assert payload["packages"][0]["name"] == "bitnami/redis"
        assert payload["packages"][0]["created_at"] == "1970-01-01T00:00:00Z"

    @pytest.mark.anyio
    async def test_unknown_tool(self):
        with pytest.raises(HelmReadmeError) as exc_info:
            await dispatch_tool(_ctx(), "get_readme_from_npm", {})
        assert exc_info.value.code == "UNKNOWN_TOOL"

    @pytest.mark.anyio
    async def test_arguments_must_be_object(self):
        with pytest.raises(ValidationError):
            await dispatch_tool(_ctx(), README_TOOL_NAME, ["bitnami/redis"])

    @pytest.mark.anyio
    async def test_invalid_package_name_raises(self):
        with pytest.raises(HelmReadmeError) as exc_info:
            await dispatch_tool(_ctx(), README_TOOL_NAME, {"package_name": "redis"})
        assert exc_info.value.code == "INVALID_PACKAGE_NAME"


class TestToolCallError:
    def test_message_is_json_payload(self):
        err = ToolCallError(ValidationError("limit must be a number", field="limit"))
        assert json.loads(str(err)) == {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "limit must be a number",
                "status_code": 400,
                "details": {"field": "limit"},
            }
        }
        assert err.payload == json.loads(str(err))


class TestServerWiring:
    def test_handlers_registered(self):
        server = McpServer("test")
        register_handlers(server, _ctx())
        assert mcp_types.ListToolsRequest in server.request_handlers
        assert mcp_types.CallToolRequest in server.request_handlers

    def test_create_mcp_server(self):
        server = create_mcp_server(_ctx())
        assert server.name == "helm-package-readme-mcp"

    def test_create_app_routes(self):
        app = create_app(_ctx())
        paths = {getattr(route, "path", None) for route in app.routes}
        assert "/sse" in paths
        assert "/messages" in paths
