"""GitHub fallback for chart READMEs that Artifact Hub does not carry.

Tries the contents API first, then ``raw.githubusercontent.com`` on the
``main`` and ``master`` branches.  Nothing here raises: a README that
cannot be found for any reason comes back as ``None``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Dict, Optional, Tuple

import httpx

from helm_readme_mcp.constants import (
    ENRICHMENT_RETRIES,
    GITHUB_API_URL,
    GITHUB_RAW_URL,
    HTTP_RETRIES,
    HTTP_RETRY_BASE_DELAY,
    HTTP_TIMEOUT,
    USER_AGENT,
)
from helm_readme_mcp.registry.http import SleepFn, raise_for_status, with_retry
from helm_readme_mcp.registry.models import RateLimitInfo

logger = logging.getLogger(__name__)

README_FILENAMES = (
    "README.md",
    "readme.md",
    "README.rst",
    "readme.rst",
    "README.txt",
    "readme.txt",
)
RAW_BRANCHES = ("main", "master")

_GITHUB_URL_PATTERNS = (
    re.compile(r"^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^git\+https://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^git://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^([^/:]+)/([^/]+)$"),  # owner/repo
)


def parse_github_url(url: str) -> Optional[Tuple[str, str]]:
    """Return ``(owner, repo)`` for a GitHub repository URL, else ``None``."""
    for pattern in _GITHUB_URL_PATTERNS:
        match = pattern.match(url.strip())
        if match and match.group(1) and match.group(2):
            return match.group(1), match.group(2)
    return None


def _join(directory: Optional[str], filename: str) -> str:
    if not directory:
        return filename
    return f"{directory.strip('/')}/{filename}"


class GitHubClient:
    """Minimal async GitHub client used for README lookups."""

    def __init__(
        self,
        api_url: str = GITHUB_API_URL,
        raw_url: str = GITHUB_RAW_URL,
        *,
        token: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT,
        user_agent: str = USER_AGENT,
        retries: int = HTTP_RETRIES,
        base_delay: float = HTTP_RETRY_BASE_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._token = token or None
        self._timeout = timeout
        self._user_agent = user_agent
        self._retries = retries
        self._base_delay = base_delay
        self._transport = transport
        self._sleep = sleep
        self._client: Any = None  # lazy httpx.AsyncClient

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _api_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    async def _retry(self, fn: Any, context: str, attempts: int) -> Any:
        kwargs: Dict[str, Any] = {
            "attempts": attempts,
            "base_delay": self._base_delay,
            "context": context,
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return await with_retry(fn, **kwargs)

    # ── README lookup ───────────────────────────────────────────────

    async def get_readme_content(
        self,
        repo_url: str,
        directory: Optional[str] = None,
    ) -> Optional[str]:
        """Fetch a README for the repository at *repo_url*.

        *directory* is the chart's path inside the repository, if any.
        """
        parsed = parse_github_url(repo_url)
        if parsed is None:
            logger.warning("Unable to parse GitHub URL: %s", repo_url)
            return None
        owner, repo = parsed

        try:
            content = await self._readme_via_api(owner, repo, directory)
        except Exception as exc:
            logger.debug("GitHub API README fetch failed for %s/%s, trying raw: %s", owner, repo, exc)
            content = None
        if content:
            return content

        return await self._readme_via_raw(owner, repo, directory)

    async def _readme_via_api(
        self,
        owner: str,
        repo: str,
        directory: Optional[str],
    ) -> Optional[str]:
        client = await self._ensure_client()

        for filename in README_FILENAMES:
            path = _join(directory, filename)
            url = f"{self._api_url}/repos/{owner}/{repo}/contents/{path}"
            context = f"{owner}/{repo}/{path}"

            async def _fetch(url: str = url, context: str = context) -> Optional[str]:
                resp = await client.get(url, headers=self._api_headers())
                if resp.status_code == 404:
                    return None
                raise_for_status(resp, f"GitHub API for {context}")
                return _decode_contents(resp.json())

            content = await self._retry(
                _fetch, f"GitHub README({context})", self._retries
            )
            if content:
                logger.debug("Fetched README via GitHub API: %s", context)
                return content
        return None

    async def _readme_via_raw(
        self,
        owner: str,
        repo: str,
        directory: Optional[str],
    ) -> Optional[str]:
        for filename in README_FILENAMES:
            path = _join(directory, filename)
            for branch in RAW_BRANCHES:
                url = f"{self._raw_url}/{owner}/{repo}/{branch}/{path}"
                try:
                    content = await self._fetch_raw(url, f"{owner}/{repo}/{path} ({branch})")
                except Exception as exc:
                    logger.debug("Raw fetch failed for %s: %s", url, exc)
                    continue
                if content:
                    logger.debug("Found README via raw GitHub: %s/%s/%s (%s)", owner, repo, path, branch)
                    return content

        logger.debug("No README found for %s/%s", owner, repo)
        return None

    async def _fetch_raw(self, url: str, context: str) -> Optional[str]:
        client = await self._ensure_client()

        async def _fetch() -> Optional[str]:
            resp = await client.get(url)
            if resp.status_code == 404:
                return None
            raise_for_status(resp, f"GitHub raw for {context}")
            return resp.text

        return await self._retry(_fetch, f"GitHub raw({context})", ENRICHMENT_RETRIES)

    # ── rate limit ──────────────────────────────────────────────────

    async def check_rate_limit(self) -> Optional[RateLimitInfo]:
        """Return the authenticated quota; ``None`` without a token or on failure."""
        if not self._token:
            return None
        try:
            client = await self._ensure_client()
            resp = await client.get(f"{self._api_url}/rate_limit", headers=self._api_headers())
            if not resp.is_success:
                return None
            rate = resp.json()["rate"]
            return RateLimitInfo(
                limit=int(rate["limit"]),
                remaining=int(rate["remaining"]),
                reset=int(rate["reset"]),
            )
        except Exception as exc:
            logger.warning("Failed to check GitHub rate limit: %s", exc)
            return None


def _decode_contents(payload: Any) -> Optional[str]:
    """Decode the base64 ``content`` field of a contents-API response."""
    if not isinstance(payload, dict):
        return None
    encoded = payload.get("content")
    if not isinstance(encoded, str):
        return None
    try:
        return base64.b64decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        logger.debug("Undecodable README content: %s", exc)
        return None
