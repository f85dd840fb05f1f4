"""Environment variable handling for configuration values.

Handles ``${VAR}`` expansion in string values and the flat environment
overrides (``CACHE_TTL``, ``CACHE_MAX_SIZE``, ``LOG_LEVEL``,
``GITHUB_TOKEN``) that take precedence over the file.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Mapping, Optional, Tuple

# Regex for ${VAR_NAME} - captures the variable name inside ${}
_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

# env var -> (section, key)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "CACHE_TTL": ("cache", "ttl_ms"),
    "CACHE_MAX_SIZE": ("cache", "max_size_bytes"),
    "LOG_LEVEL": ("logging", "level"),
    "GITHUB_TOKEN": ("github", "token"),
}


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ``${VAR}`` references in string values.

    - If the env var is not set, the placeholder is left unchanged.
    - Non-string leaves are returned as-is.
    - Dicts and lists are walked recursively.
    """
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(
            lambda m: os.environ.get(m.group(1), m.group(0)),
            value,
        )
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def apply_env_overrides(
    raw_data: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Return a copy of *raw_data* with set override variables merged in.

    Values stay strings; Pydantic coerces them during validation.
    """
    env = os.environ if environ is None else environ
    merged = {k: (dict(v) if isinstance(v, dict) else v) for k, v in raw_data.items()}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        existing = merged.get(section)
        if not isinstance(existing, dict):
            existing = {}
        existing[key] = value
        merged[section] = existing
    return merged
