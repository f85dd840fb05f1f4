"""``get_readme_from_helm``: chart README with usage examples."""

from __future__ import annotations

import logging
from typing import List, Optional

from helm_readme_mcp.cache import package_readme_key
from helm_readme_mcp.models import (
    AuthorInfo,
    InstallationInfo,
    PackageBasicInfo,
    PackageReadmeResponse,
    RepositoryInfo,
    UsageExample,
)
from helm_readme_mcp.parsing.readme import clean_markdown, extract_description, parse_usage_examples
from helm_readme_mcp.parsing.values import extract_values_documentation
from helm_readme_mcp.registry.models import PackageRecord
from helm_readme_mcp.tools.context import ToolContext
from helm_readme_mcp.tools.validators import (
    normalize_version,
    parse_package_name,
    validate_version,
)

logger = logging.getLogger(__name__)

NO_README = "No README available"


def _not_found(package_name: str, version: str) -> PackageReadmeResponse:
    return PackageReadmeResponse(
        package_name=package_name,
        version=version,
        description="",
        readme_content="",
        usage_examples=[],
        installation=InstallationInfo(command=""),
        basic_info=PackageBasicInfo(name=package_name, version=version),
        exists=False,
    )


def build_installation(package_name: str, record: PackageRecord, version: str) -> InstallationInfo:
    """Install command plus ``helm repo add`` / ``--version`` alternatives."""
    repo, chart = package_name.split("/")
    alternatives: List[str] = []
    if record.repository is not None and record.repository.url != record.repository.name:
        alternatives.append(f"helm repo add {repo} {record.repository.url}")
    if version != "latest":
        alternatives.append(
            f"helm install my-{chart} {package_name} --version {record.version or version}"
        )
    return InstallationInfo(
        command=f"helm install my-{chart} {package_name}",
        alternatives=alternatives or None,
    )


def build_basic_info(record: PackageRecord) -> PackageBasicInfo:
    return PackageBasicInfo(
        name=record.name,
        version=record.version,
        description=record.description,
        app_version=record.app_version,
        homepage=record.home_url,
        sources=record.source_links or None,
        license=record.license,
        maintainers=[AuthorInfo(name=m.name, email=m.email) for m in record.maintainers],
        keywords=list(record.keywords),
        annotations=record.data,
    )


def build_repository_info(record: PackageRecord) -> Optional[RepositoryInfo]:
    if record.repository is None:
        return None
    return RepositoryInfo(url=record.repository.url, directory=record.relative_path)


async def _readme_text(ctx: ToolContext, record: PackageRecord, package_name: str) -> str:
    if record.readme:
        return record.readme
    if record.repository is None or not record.repository.url:
        return ""
    logger.debug("No README in Artifact Hub for %s, trying GitHub: %s", package_name, record.repository.url)
    content = await ctx.github.get_readme_content(record.repository.url, record.relative_path)
    return content or ""


async def _usage_examples(
    ctx: ToolContext,
    readme: str,
    repo: str,
    chart: str,
    version: str,
) -> List[UsageExample]:
    examples = parse_usage_examples(readme) if readme else []
    values = await ctx.values_text(repo, chart, version)
    if values:
        examples.extend(extract_values_documentation(values))
    return examples


async def get_package_readme(
    ctx: ToolContext,
    package_name: str,
    version: str = "latest",
    include_examples: bool = True,
) -> PackageReadmeResponse:
    """Fetch a chart README, its usage examples and install instructions.

    A chart (or version) that cannot be fetched yields a response with
    ``exists=False`` rather than an error; invalid arguments still raise.
    """
    logger.info("Getting Helm chart README: %s@%s", package_name, version)

    repo, chart = parse_package_name(package_name)
    package_name = f"{repo}/{chart}"
    if version and version != "latest":
        validate_version(version)

    normalized = normalize_version(version)
    cache_key = package_readme_key(package_name, normalized, include_examples)
    cached = ctx.cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for package README: %s@%s", package_name, normalized)
        return cached

    try:
        record = await ctx.artifacthub.get_package_info(package_name, normalized)
    except Exception as exc:
        logger.warning("Package not found: %s@%s (%s)", package_name, normalized, exc)
        return _not_found(package_name, normalized)

    readme = await _readme_text(ctx, record, package_name)
    examples: List[UsageExample] = []
    if include_examples:
        examples = await _usage_examples(ctx, readme, repo, chart, normalized)

    cleaned = clean_markdown(readme or NO_README)
    response = PackageReadmeResponse(
        package_name=package_name,
        version=record.version,
        description=record.description or extract_description(cleaned),
        readme_content=cleaned,
        usage_examples=examples,
        installation=build_installation(package_name, record, normalized),
        basic_info=build_basic_info(record),
        repository=build_repository_info(record),
        exists=True,
    )

    ctx.cache.set(cache_key, response)
    logger.info("Retrieved README for %s@%s", package_name, normalized)
    return response
