"""Argument validation and normalisation for the tool handlers.

Validators raise :class:`InvalidPackageNameError` or
:class:`ValidationError` and return nothing; sanitisers never raise.
"""

from __future__ import annotations

import math
import re
from typing import Any, Tuple

from helm_readme_mcp.errors import InvalidPackageNameError, ValidationError

MAX_NAME_SEGMENT = 100
MAX_VERSION_LENGTH = 50
MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 500
MIN_LIMIT = 1
MAX_LIMIT = 250

RESERVED_NAMES = frozenset({"_", ".", "..", "con", "prn", "aux", "nul"})

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")
_SEMVER_RE = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)"
    r"(?:-([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
_SIMPLE_VERSION_RE = re.compile(r"^v?(\d+(?:\.\d+)*(?:-[a-zA-Z0-9-]+)?)$")
_DANGEROUS_QUERY_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
)
_WHITESPACE_RE = re.compile(r"\s+")


def validate_package_name(package_name: Any) -> None:
    """Require ``repo/chart`` with two clean, non-reserved segments."""
    if not isinstance(package_name, str) or not package_name:
        raise InvalidPackageNameError("Package name is required and must be a string")

    package_name = package_name.strip()
    if not package_name:
        raise InvalidPackageNameError("Package name cannot be empty")

    parts = package_name.split("/")
    if len(parts) != 2:
        raise InvalidPackageNameError(
            f"Package name must be in format 'repo/chart', got: {package_name}"
        )
    repo, chart = parts

    if not repo.strip():
        raise InvalidPackageNameError("Repository name cannot be empty")
    if not chart.strip():
        raise InvalidPackageNameError("Chart name cannot be empty")

    if _INVALID_NAME_CHARS.search(repo):
        raise InvalidPackageNameError(f"Repository name contains invalid characters: {repo}")
    if _INVALID_NAME_CHARS.search(chart):
        raise InvalidPackageNameError(f"Chart name contains invalid characters: {chart}")

    if len(repo) > MAX_NAME_SEGMENT:
        raise InvalidPackageNameError("Repository name is too long (max 100 characters)")
    if len(chart) > MAX_NAME_SEGMENT:
        raise InvalidPackageNameError("Chart name is too long (max 100 characters)")

    if repo.lower() in RESERVED_NAMES or chart.lower() in RESERVED_NAMES:
        raise InvalidPackageNameError("Package name contains reserved words")


def validate_version(version: Any) -> None:
    if not isinstance(version, str) or not version:
        raise ValidationError("Version must be a string", field="version")

    version = version.strip()
    if not version:
        raise ValidationError("Version cannot be empty", field="version")
    if version == "latest":
        return

    # Helm charts often use shorter forms than strict semver.
    if not _SEMVER_RE.match(version) and not _SIMPLE_VERSION_RE.match(version):
        raise ValidationError(f"Invalid version format: {version}", field="version")

    if len(version) > MAX_VERSION_LENGTH:
        raise ValidationError("Version is too long (max 50 characters)", field="version")


def validate_search_query(query: Any) -> None:
    """Length-check *query* and reject markup/script injection attempts."""
    if not isinstance(query, str) or not query:
        raise ValidationError("Search query is required and must be a string", field="query")

    query = query.strip()
    if not query:
        raise ValidationError("Search query cannot be empty", field="query")
    if len(query) < MIN_QUERY_LENGTH:
        raise ValidationError("Search query must be at least 2 characters long", field="query")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError("Search query is too long (max 500 characters)", field="query")

    for pattern in _DANGEROUS_QUERY_PATTERNS:
        if pattern.search(query):
            raise ValidationError("Search query contains invalid characters", field="query")


def validate_limit(limit: Any) -> None:
    if isinstance(limit, bool) or not isinstance(limit, (int, float)):
        raise ValidationError("Limit must be a number", field="limit")
    if isinstance(limit, float) and not limit.is_integer():
        raise ValidationError("Limit must be an integer", field="limit")
    if limit < MIN_LIMIT:
        raise ValidationError("Limit must be at least 1", field="limit")
    if limit > MAX_LIMIT:
        raise ValidationError("Limit cannot exceed 250", field="limit")


def validate_score(score: Any, field_name: str = "score") -> None:
    """Scores are finite numbers in ``[0, 1]``."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if not math.isfinite(score):
        raise ValidationError(f"{field_name} must be a finite number", field=field_name)
    if score < 0 or score > 1:
        raise ValidationError(f"{field_name} must be between 0 and 1", field=field_name)


def validate_boolean(value: Any, field_name: str) -> None:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean", field=field_name)


def normalize_version(version: Any) -> str:
    """Map empty and ``latest`` to ``"latest"`` and drop a leading ``v`` before a digit."""
    if not isinstance(version, str):
        return "latest"
    version = version.strip()
    if not version or version == "latest":
        return "latest"
    if version.startswith("v") and version[1:2].isdigit():
        return version[1:]
    return version


def sanitize_search_query(query: Any) -> str:
    if not isinstance(query, str):
        return ""
    return _WHITESPACE_RE.sub(" ", query.strip())


def sanitize_package_name(package_name: Any) -> str:
    if not isinstance(package_name, str):
        return ""
    return _WHITESPACE_RE.sub("-", package_name.strip().lower())


def parse_package_name(package_name: str) -> Tuple[str, str]:
    """Validate and split into ``(repo, chart)``."""
    validate_package_name(package_name)
    repo, chart = package_name.strip().split("/")
    return repo.strip(), chart.strip()
