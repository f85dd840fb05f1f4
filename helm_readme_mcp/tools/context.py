"""Shared dependencies for the tool functions.

A single :class:`ToolContext` is built at process start and handed to
every tool call, so tests can swap in fakes without patching globals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from helm_readme_mcp.cache import TTLCache, values_key
from helm_readme_mcp.config.schema import HelmReadmeConfig
from helm_readme_mcp.display.logging_config import secret_redaction_filter
from helm_readme_mcp.registry.client import ArtifactHubClient
from helm_readme_mcp.registry.github import GitHubClient

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Config, cache and upstream clients used by the tools."""

    config: HelmReadmeConfig = field(default_factory=HelmReadmeConfig)
    cache: TTLCache = field(default_factory=TTLCache)
    artifacthub: ArtifactHubClient = field(default_factory=ArtifactHubClient)
    github: GitHubClient = field(default_factory=GitHubClient)

    @classmethod
    def from_config(cls, config: Optional[HelmReadmeConfig] = None) -> ToolContext:
        """Build the cache and clients from *config* (defaults when ``None``)."""
        config = config or HelmReadmeConfig()
        http = config.http
        secret_redaction_filter.register(config.github.token)

        cache = TTLCache(
            ttl_ms=config.cache.ttl_ms,
            max_size=config.cache.max_size_bytes,
            cleanup_interval=config.cache.cleanup_interval_s,
        )
        artifacthub = ArtifactHubClient(
            http.artifacthub_base_url,
            timeout=http.timeout_s,
            user_agent=http.user_agent,
            retries=http.retries,
            base_delay=http.retry_base_delay_s,
        )
        github = GitHubClient(
            config.github.api_url,
            config.github.raw_url,
            token=config.github.token,
            timeout=http.timeout_s,
            user_agent=http.user_agent,
            retries=http.retries,
            base_delay=http.retry_base_delay_s,
        )
        return cls(config=config, cache=cache, artifacthub=artifacthub, github=github)

    async def values_text(
        self,
        repo: str,
        chart: str,
        version: Optional[str] = None,
    ) -> Optional[str]:
        """Chart values.yaml text, cached; ``None`` when the registry has none."""
        key = values_key(f"{repo}/{chart}", version)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        text = await self.artifacthub.get_package_values(repo, chart, version)
        if text is not None:
            self.cache.set(key, text)
        return text

    async def start(self) -> None:
        await self.cache.start()
        logger.debug(
            "Tool context started (github token: %s)",
            "set" if self.github.has_token else "not set",
        )

    async def close(self) -> None:
        """Close HTTP clients and stop the cache sweep."""
        await self.artifacthub.close()
        await self.github.close()
        await self.cache.close()
