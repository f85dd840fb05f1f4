"""Artifact Hub and GitHub clients."""

from helm_readme_mcp.registry.client import ArtifactHubClient, split_package_name
from helm_readme_mcp.registry.github import GitHubClient, parse_github_url
from helm_readme_mcp.registry.models import (
    AvailableVersion,
    MaintainerRecord,
    PackageRecord,
    RateLimitInfo,
    RepositoryRecord,
    SearchPage,
)

__all__ = [
    "ArtifactHubClient",
    "AvailableVersion",
    "GitHubClient",
    "MaintainerRecord",
    "PackageRecord",
    "RateLimitInfo",
    "RepositoryRecord",
    "SearchPage",
    "parse_github_url",
    "split_package_name",
]
