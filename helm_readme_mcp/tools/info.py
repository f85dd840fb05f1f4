"""``get_package_info_from_helm``: chart metadata and dependencies."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from helm_readme_mcp.cache import package_info_key
from helm_readme_mcp.models import AuthorInfo, DownloadStats, PackageInfoResponse
from helm_readme_mcp.parsing.values import parse_dependencies
from helm_readme_mcp.tools.context import ToolContext
from helm_readme_mcp.tools.readme import build_repository_info
from helm_readme_mcp.tools.validators import parse_package_name

logger = logging.getLogger(__name__)


def _not_found(package_name: str) -> PackageInfoResponse:
    return PackageInfoResponse(
        package_name=package_name,
        latest_version="",
        description="",
        author="",
        maintainers=[],
        keywords=[],
        download_stats=DownloadStats(estimated=False),
        exists=False,
    )


async def _load_dependencies(ctx: ToolContext, repo: str, chart: str) -> Optional[Dict[str, str]]:
    """Dependencies from the configured source; ``None`` when unavailable."""
    source = ctx.config.dependencies.source
    if source == "none":
        return None
    document = await ctx.values_text(repo, chart)
    if document is None:
        logger.debug("No %s document for %s/%s; dependencies unknown", source, repo, chart)
        return None
    return parse_dependencies(document)


async def get_package_info(
    ctx: ToolContext,
    package_name: str,
    include_dependencies: bool = True,
    include_dev_dependencies: bool = False,
) -> PackageInfoResponse:
    """Fetch chart metadata.

    Download counts are estimated from the star count since Artifact Hub
    publishes none.  Charts have no dev dependencies, so
    ``dev_dependencies`` is never populated.
    """
    logger.info("Getting Helm chart info: %s", package_name)

    repo, chart = parse_package_name(package_name)
    package_name = f"{repo}/{chart}"
    cache_key = package_info_key(package_name, include_dependencies=include_dependencies)
    cached = ctx.cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for package info: %s", package_name)
        return cached

    try:
        record = await ctx.artifacthub.get_package_info(package_name)
    except Exception as exc:
        logger.warning("Package not found: %s (%s)", package_name, exc)
        return _not_found(package_name)

    dependencies = None
    if include_dependencies:
        dependencies = await _load_dependencies(ctx, repo, chart)

    maintainers = [AuthorInfo(name=m.name, email=m.email) for m in record.maintainers]
    response = PackageInfoResponse(
        package_name=package_name,
        latest_version=record.version,
        description=record.description,
        author=maintainers[0].name if maintainers and maintainers[0].name else "Unknown",
        maintainers=maintainers,
        license=record.license,
        keywords=list(record.keywords),
        dependencies=dependencies,
        dev_dependencies=None,
        download_stats=DownloadStats.from_stars(record.stars),
        repository=build_repository_info(record),
        app_version=record.app_version,
        deprecated=record.deprecated,
        signed=record.signed,
        exists=True,
    )

    ctx.cache.set(cache_key, response)
    logger.info("Retrieved info for %s", package_name)
    return response
