"""``search_packages_from_helm``: keyword search over Helm charts."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from helm_readme_mcp.cache import search_key
from helm_readme_mcp.errors import PackageNotFoundError
from helm_readme_mcp.models import (
    AuthorInfo,
    PackageSearchResult,
    SearchPackagesResponse,
    SearchRepository,
)
from helm_readme_mcp.registry.models import PackageRecord, RepositoryRecord
from helm_readme_mcp.tools.context import ToolContext
from helm_readme_mcp.tools.validators import (
    sanitize_search_query,
    validate_limit,
    validate_score,
    validate_search_query,
)

logger = logging.getLogger(__name__)


def format_timestamp(seconds: int) -> str:
    """Unix seconds -> ``2024-01-02T03:04:05Z``."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_search_result(record: PackageRecord) -> PackageSearchResult:
    repository = record.repository or RepositoryRecord(name="")
    return PackageSearchResult(
        name=f"{repository.name}/{record.name}",
        version=record.version,
        description=record.description,
        keywords=list(record.keywords),
        repository=SearchRepository(
            name=repository.name,
            display_name=repository.display_name or repository.name,
            url=repository.url,
        ),
        maintainers=[AuthorInfo(name=m.name, email=m.email) for m in record.maintainers],
        app_version=record.app_version,
        created_at=format_timestamp(record.created_at),
        deprecated=record.deprecated,
        signed=record.signed,
        stars=record.stars,
    )


async def search_packages(
    ctx: ToolContext,
    query: str,
    limit: int = 20,
    quality: Optional[float] = None,
    popularity: Optional[float] = None,
) -> SearchPackagesResponse:
    """Search Artifact Hub for Helm charts matching *query*.

    *quality* and *popularity* are validated for compatibility with other
    package-search tools but Artifact Hub has no equivalent ranking, so
    they do not affect the results.
    """
    logger.info("Searching Helm charts: %r (limit: %s)", query, limit)

    validate_search_query(query)
    validate_limit(limit)
    if quality is not None:
        validate_score(quality, "quality")
        logger.debug("Quality parameter ignored for Artifact Hub search: %s", quality)
    if popularity is not None:
        validate_score(popularity, "popularity")
        logger.debug("Popularity parameter ignored for Artifact Hub search: %s", popularity)

    limit = int(limit)
    sanitized = sanitize_search_query(query)
    cache_key = search_key(sanitized, limit)
    cached = ctx.cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for search: %r (limit: %d)", sanitized, limit)
        return cached

    try:
        page = await ctx.artifacthub.search_packages(sanitized, limit)
    except PackageNotFoundError:
        logger.warning("Artifact Hub search endpoint returned 404 for %r", sanitized)
        return SearchPackagesResponse(query=sanitized, total=0, packages=[])

    packages = [to_search_result(record) for record in page.packages]
    # The search API reports no total; this is the page size.
    response = SearchPackagesResponse(query=sanitized, total=len(packages), packages=packages)

    ctx.cache.set(cache_key, response, ctx.config.cache.search_ttl_ms)
    logger.info("Searched charts: %r, found %d results", sanitized, len(packages))
    return response
