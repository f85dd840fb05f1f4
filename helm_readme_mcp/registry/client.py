"""Async client for the Artifact Hub packages API (Helm charts only).

Every request goes through :func:`~helm_readme_mcp.registry.http.with_retry`.
Package and search lookups raise on failure; the values and changelog
enrichment calls return ``None`` instead.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from helm_readme_mcp.constants import (
    ARTIFACTHUB_API_URL,
    ENRICHMENT_RETRIES,
    HTTP_RETRIES,
    HTTP_RETRY_BASE_DELAY,
    HTTP_TIMEOUT,
    USER_AGENT,
)
from helm_readme_mcp.errors import InvalidPackageNameError, VersionNotFoundError
from helm_readme_mcp.registry.http import SleepFn, raise_for_status, with_retry
from helm_readme_mcp.registry.models import PackageRecord, SearchPage

logger = logging.getLogger(__name__)


def split_package_name(package_name: str) -> Tuple[str, str]:
    """``"bitnami/nginx"`` -> ``("bitnami", "nginx")``."""
    parts = package_name.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidPackageNameError(f"'{package_name}' is not of the form repo/chart")
    return parts[0], parts[1]


def _seg(value: str) -> str:
    return quote(value, safe="")


class ArtifactHubClient:
    """Async HTTP client for ``https://artifacthub.io/api/v1``.

    Parameters
    ----------
    base_url:
        API root; overridable for mirrors and tests.
    timeout:
        Per-request timeout in seconds.
    retries:
        Attempt budget for package and search lookups.
    base_delay:
        First backoff delay in seconds; doubles on each retry.
    transport:
        Optional ``httpx`` transport (``httpx.MockTransport`` in tests).
    sleep:
        Awaitable used between retries.
    """

    def __init__(
        self,
        base_url: str = ARTIFACTHUB_API_URL,
        *,
        timeout: float = HTTP_TIMEOUT,
        user_agent: str = USER_AGENT,
        retries: int = HTTP_RETRIES,
        base_delay: float = HTTP_RETRY_BASE_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._retries = retries
        self._base_delay = base_delay
        self._transport = transport
        self._sleep = sleep
        self._client: Any = None  # lazy httpx.AsyncClient

    # ── lifecycle ───────────────────────────────────────────────────

    async def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Accept": "application/json", "User-Agent": self._user_agent},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _retry(self, fn: Any, context: str, attempts: int) -> Any:
        kwargs: Dict[str, Any] = {
            "attempts": attempts,
            "base_delay": self._base_delay,
            "context": context,
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return await with_retry(fn, **kwargs)

    async def _get_json(self, path: str, context: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._ensure_client()
        resp = await client.get(path, params=params)
        raise_for_status(resp, context)
        return resp.json()

    # ── public API ──────────────────────────────────────────────────

    async def get_package_info(
        self,
        package_name: str,
        version: Optional[str] = None,
    ) -> PackageRecord:
        """Fetch chart metadata from ``GET /packages/helm/{repo}/{chart}``.

        When *version* names a release other than the current one, the
        chart's ``available_versions`` are checked first and that release
        is fetched from ``/packages/helm/{repo}/{chart}/{version}``.

        Raises :class:`PackageNotFoundError`, :class:`VersionNotFoundError`
        or :class:`NetworkError`.
        """
        repo, chart = split_package_name(package_name)
        path = f"/packages/helm/{_seg(repo)}/{_seg(chart)}"

        async def _fetch() -> PackageRecord:
            logger.debug("Fetching Helm chart info: %s", package_name)
            record = PackageRecord.from_dict(await self._get_json(path, package_name))
            logger.debug("Fetched Helm chart info: %s (%s)", package_name, record.version)
            return record

        record = await self._retry(
            _fetch, f"Artifact Hub package info({package_name})", self._retries
        )
        if not version or version == "latest" or record.version == version:
            return record

        if not record.has_version(version):
            raise VersionNotFoundError(package_name, version)
        return await self._get_version(repo, chart, version)

    async def _get_version(self, repo: str, chart: str, version: str) -> PackageRecord:
        context = f"{repo}/{chart}@{version}"
        path = f"/packages/helm/{_seg(repo)}/{_seg(chart)}/{_seg(version)}"

        async def _fetch() -> PackageRecord:
            logger.debug("Fetching Helm chart version: %s", context)
            return PackageRecord.from_dict(await self._get_json(path, context))

        return await self._retry(
            _fetch, f"Artifact Hub version info({context})", self._retries
        )

    async def search_packages(
        self,
        query: str,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchPage:
        """Search Helm charts via ``GET /packages/search``.

        A response body without a package list yields an empty page.
        """
        params = {
            "facets": "false",
            "kind": "0",  # Helm charts
            "limit": str(limit),
            "offset": str(offset),
            "sort": "relevance",
            "ts_query_web": query,
        }

        async def _fetch() -> SearchPage:
            logger.debug("Searching Helm charts: %s (limit: %d)", query, limit)
            data = await self._get_json("/packages/search", f"search for query {query}", params)
            page = SearchPage.from_dict(data)
            if not page.packages:
                logger.debug("Artifact Hub search for %r returned no packages", query)
            return page

        return await self._retry(
            _fetch, f"Artifact Hub search({query})", self._retries
        )

    async def get_package_values(
        self,
        repo: str,
        chart: str,
        version: Optional[str] = None,
    ) -> Optional[str]:
        """Return the chart's ``values.yaml`` text, or ``None`` if unavailable."""
        return await self._get_optional_text(repo, chart, version, "values")

    async def get_package_changelog(
        self,
        repo: str,
        chart: str,
        version: Optional[str] = None,
    ) -> Optional[str]:
        """Return the chart changelog text, or ``None`` if unavailable."""
        return await self._get_optional_text(repo, chart, version, "changelog")

    async def _get_optional_text(
        self,
        repo: str,
        chart: str,
        version: Optional[str],
        resource: str,
    ) -> Optional[str]:
        path = f"/packages/helm/{_seg(repo)}/{_seg(chart)}"
        if version and version != "latest":
            path += f"/{_seg(version)}"
        path += f"/{resource}"
        context = f"{repo}/{chart} {resource}"

        async def _fetch() -> Optional[str]:
            client = await self._ensure_client()
            resp = await client.get(path, headers={"Accept": "text/plain"})
            if resp.status_code == 404:
                return None
            raise_for_status(resp, context)
            return resp.text

        try:
            return await self._retry(
                _fetch, f"Artifact Hub {resource}({repo}/{chart})", ENRICHMENT_RETRIES
            )
        except Exception as exc:
            logger.warning("Failed to fetch %s for %s/%s: %s", resource, repo, chart, exc)
            return None
