"""Pydantic configuration models for Helm README MCP.

Defines the validated config structure using the versioned v1 format.
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from helm_readme_mcp.constants import (
    ARTIFACTHUB_API_URL,
    CACHE_CLEANUP_INTERVAL,
    CACHE_MAX_SIZE_BYTES,
    CACHE_TTL_MS,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    GITHUB_API_URL,
    GITHUB_RAW_URL,
    HTTP_RETRIES,
    HTTP_RETRY_BASE_DELAY,
    HTTP_TIMEOUT,
    SEARCH_CACHE_TTL_MS,
    USER_AGENT,
)

# A ${VAR} placeholder whose variable was unset at load time.
_UNEXPANDED_RE = re.compile(r"\$\{\w+\}")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServerSettings(BaseModel):
    """MCP transport settings."""

    transport: Literal["stdio", "sse"] = "stdio"
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    @field_validator("transport", mode="before")
    @classmethod
    def _normalise_transport(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class CacheSettings(BaseModel):
    """In-memory response cache settings. Durations are in milliseconds."""

    ttl_ms: int = Field(
        default=CACHE_TTL_MS,
        gt=0,
        description="Default time-to-live of a cached tool response. Also CACHE_TTL env var.",
    )
    max_size_bytes: int = Field(
        default=CACHE_MAX_SIZE_BYTES,
        gt=0,
        description="Estimated size bound before the oldest entries are evicted. "
        "Also CACHE_MAX_SIZE env var.",
    )
    search_ttl_ms: int = Field(
        default=SEARCH_CACHE_TTL_MS,
        gt=0,
        description="Time-to-live for search results.",
    )
    cleanup_interval_s: float = Field(
        default=CACHE_CLEANUP_INTERVAL,
        gt=0,
        description="Seconds between periodic sweeps of expired entries.",
    )


class HttpSettings(BaseModel):
    """Outbound HTTP behaviour shared by the registry and GitHub clients."""

    timeout_s: float = Field(default=HTTP_TIMEOUT, gt=0, description="Per-request timeout.")
    retries: int = Field(default=HTTP_RETRIES, ge=1, le=10, description="Attempts per call.")
    retry_base_delay_s: float = Field(
        default=HTTP_RETRY_BASE_DELAY,
        ge=0,
        description="Initial backoff delay; doubled on every further attempt.",
    )
    user_agent: str = USER_AGENT
    artifacthub_base_url: str = ARTIFACTHUB_API_URL


class GitHubSettings(BaseModel):
    """GitHub README fallback settings."""

    token: Optional[str] = Field(
        default=None,
        description="Personal access token; raises API rate limits. "
        "Supports ${ENV_VAR}. Also GITHUB_TOKEN env var.",
    )
    api_url: str = GITHUB_API_URL
    raw_url: str = GITHUB_RAW_URL

    @field_validator("token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and (not v.strip() or _UNEXPANDED_RE.fullmatch(v.strip())):
            return None
        return v


class DependencySettings(BaseModel):
    """Where chart dependencies are read from.

    ``values`` scans the chart's values.yaml for a Chart.yaml-style
    ``dependencies:`` list; ``none`` disables dependency lookup.
    """

    source: Literal["values", "none"] = "values"


class LoggingSettings(BaseModel):
    """Log verbosity. Also LOG_LEVEL env var."""

    level: str = DEFAULT_LOG_LEVEL

    @field_validator("level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        upper = v.strip().upper()
        if upper == "WARN":
            upper = "WARNING"
        if upper not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'. Expected one of {', '.join(_LOG_LEVELS)}")
        return upper


class HelmReadmeConfig(BaseModel):
    """Top-level validated configuration for Helm README MCP.

    Supports version ``"1"`` format::

        {
            "version": "1",
            "server": {"transport": "stdio"},
            "cache": {"ttl_ms": 3600000},
            "github": {"token": "${GITHUB_TOKEN}"}
        }
    """

    version: str = "1"
    server: ServerSettings = Field(default_factory=ServerSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    dependencies: DependencySettings = Field(default_factory=DependencySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: str) -> str:
        if str(v).strip() != "1":
            raise ValueError(f"Unsupported config version '{v}'; only '1' is understood")
        return "1"
