"""Configuration loading, validation and environment handling."""

from helm_readme_mcp.config.loader import find_config_file, load_config
from helm_readme_mcp.config.schema import (
    CacheSettings,
    DependencySettings,
    GitHubSettings,
    HelmReadmeConfig,
    HttpSettings,
    LoggingSettings,
    ServerSettings,
)

__all__ = [
    "CacheSettings",
    "DependencySettings",
    "GitHubSettings",
    "HelmReadmeConfig",
    "HttpSettings",
    "LoggingSettings",
    "ServerSettings",
    "find_config_file",
    "load_config",
]
