"""Tests for the GitHub README fallback client."""

from __future__ import annotations

import base64
from typing import Callable, List
from unittest.mock import AsyncMock

import httpx
import pytest

from helm_readme_mcp.registry.github import GitHubClient, parse_github_url

API = "https://api.gh.example"
RAW = "https://raw.gh.example"


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    calls: List[httpx.Request],
    token: str = None,
) -> GitHubClient:
    def _record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    return GitHubClient(
        API,
        RAW,
        token=token,
        transport=httpx.MockTransport(_record),
        base_delay=0.0,
        sleep=AsyncMock(),
    )


def _contents(text: str) -> dict:
    return {"content": base64.b64encode(text.encode("utf-8")).decode("ascii"), "encoding": "base64"}


class TestParseGithubUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/bitnami/charts",
            "https://github.com/bitnami/charts.git",
            "http://github.com/bitnami/charts/",
            "git+https://github.com/bitnami/charts.git",
            "git://github.com/bitnami/charts",
            "bitnami/charts",
        ],
    )
    def test_recognised(self, url):
        assert parse_github_url(url) == ("bitnami", "charts")

    @pytest.mark.parametrize(
        "url",
        ["https://charts.bitnami.com/bitnami", "https://gitlab.com/a/b", "oci://x/y/z", "nope"],
    )
    def test_unrecognised(self, url):
        assert parse_github_url(url) is None


class TestGetReadmeContent:
    @pytest.mark.anyio
    async def test_contents_api(self):
        calls: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json=_contents("# Hello")), calls, token="tkn")
        content = await client.get_readme_content("https://github.com/o/r", "charts/app")
        assert content == "# Hello"
        assert calls[0].url.path == "/repos/o/r/contents/charts/app/README.md"
        assert calls[0].headers["authorization"] == "token tkn"

    @pytest.mark.anyio
    async def test_alternate_filename(self):
        calls: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/README.rst"):
                return httpx.Response(200, json=_contents("Title\n====="))
            return httpx.Response(404)

        client = _client(handler, calls)
        assert await client.get_readme_content("o/r") == "Title\n====="
        assert [c.url.path.rsplit("/", 1)[-1] for c in calls] == [
            "README.md",
            "readme.md",
            "README.rst",
        ]
        assert "authorization" not in calls[0].headers

    @pytest.mark.anyio
    async def test_raw_fallback_tries_main_then_master(self):
        calls: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.gh.example":
                return httpx.Response(403)
            if request.url.path == "/o/r/master/README.md":
                return httpx.Response(200, text="raw readme")
            return httpx.Response(404)

        client = _client(handler, calls)
        assert await client.get_readme_content("https://github.com/o/r") == "raw readme"
        raw_paths = [c.url.path for c in calls if c.url.host == "raw.gh.example"]
        assert raw_paths == ["/o/r/main/README.md", "/o/r/master/README.md"]

    @pytest.mark.anyio
    async def test_nothing_found_returns_none(self):
        calls: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(404), calls)
        assert await client.get_readme_content("o/r") is None
        # 6 contents-API lookups, then 6 filenames x 2 branches on raw.
        assert len(calls) == 6 + 12

    @pytest.mark.anyio
    async def test_transport_failure_never_raises(self):
        calls: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        client = _client(handler, calls)
        assert await client.get_readme_content("o/r") is None

    @pytest.mark.anyio
    async def test_unparseable_url(self):
        client = GitHubClient(API, RAW)
        assert await client.get_readme_content("https://example.com/not/github/x") is None


class TestRateLimit:
    @pytest.mark.anyio
    async def test_without_token(self):
        client = GitHubClient(API, RAW)
        assert await client.check_rate_limit() is None

    @pytest.mark.anyio
    async def test_with_token(self):
        calls: List[httpx.Request] = []
        body = {"rate": {"limit": 5000, "remaining": 4999, "reset": 1700000000}}
        client = _client(lambda r: httpx.Response(200, json=body), calls, token="tkn")
        info = await client.check_rate_limit()
        assert (info.limit, info.remaining, info.reset) == (5000, 4999, 1700000000)
        assert calls[0].url.path == "/rate_limit"

    @pytest.mark.anyio
    async def test_failure_is_none(self):
        calls: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(500), calls, token="tkn")
        assert await client.check_rate_limit() is None
