"""In-memory TTL cache for tool responses.

Entries expire ``ttl`` milliseconds after insertion. Expired entries are
dropped lazily on read and by a periodic sweep task. When the estimated
size (a fixed byte count per entry) exceeds the configured bound, the
oldest tenth of the entries is evicted before the next insert.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from helm_readme_mcp.constants import (
    CACHE_CLEANUP_INTERVAL,
    CACHE_ENTRY_SIZE_ESTIMATE,
    CACHE_MAX_SIZE_BYTES,
    CACHE_TTL_MS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its insertion time and lifetime (seconds)."""

    value: Any
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now > self.inserted_at + self.ttl


class TTLCache:
    """Keyed response cache with per-entry TTL and coarse size eviction.

    Parameters
    ----------
    ttl_ms:
        Default time-to-live in milliseconds.
    max_size:
        Estimated size bound in bytes.  Only the entry count is tracked;
        each entry is assumed to weigh :data:`CACHE_ENTRY_SIZE_ESTIMATE`.
    cleanup_interval:
        Seconds between sweeps once :meth:`start` has been awaited.
    clock:
        Monotonic time source in seconds.  Injected by tests.
    """

    def __init__(
        self,
        ttl_ms: int = CACHE_TTL_MS,
        max_size: int = CACHE_MAX_SIZE_BYTES,
        *,
        cleanup_interval: float = CACHE_CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl_ms / 1000.0
        self._max_size = max_size
        self._cleanup_interval = cleanup_interval
        self._clock = clock
        self._data: Dict[str, CacheEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

    # ── public interface ────────────────────────────────────────────

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for *key*, or ``None`` if absent or expired."""
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._data[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        """Store *value* under *key* for *ttl_ms* (default TTL when omitted)."""
        ttl = self._default_ttl if ttl_ms is None else ttl_ms / 1000.0
        self._enforce_max_size()
        self._data[key] = CacheEntry(value=value, inserted_at=self._clock(), ttl=ttl)
        logger.debug("Cache set: %s (TTL: %.0fms)", key, ttl * 1000)

    def has(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        if entry.expired(self._clock()):
            del self._data[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        removed = self._data.pop(key, None) is not None
        if removed:
            logger.debug("Cache delete: %s", key)
        return removed

    def clear(self) -> None:
        size = len(self._data)
        self._data.clear()
        logger.debug("Cache cleared: %d entries removed", size)

    def __len__(self) -> int:
        return len(self._data)

    def stats(self) -> Dict[str, int]:
        """Entry count and the (estimated) memory it represents."""
        return {
            "size": len(self._data),
            "estimated_memory_usage": len(self._data) * CACHE_ENTRY_SIZE_ESTIMATE,
        }

    # ── expiry sweep ────────────────────────────────────────────────

    def cleanup(self) -> int:
        """Remove every expired entry now.  Returns the number removed."""
        now = self._clock()
        expired = [k for k, e in self._data.items() if e.expired(now)]
        for key in expired:
            del self._data[key]
        if expired:
            logger.debug("Cache cleanup: %d expired entries removed", len(expired))
        return len(expired)

    async def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop(), name="cache-sweeper")
            logger.debug("Cache sweeper started (interval %.0fs)", self._cleanup_interval)

    async def close(self) -> None:
        """Stop the sweep task and drop all entries."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        self.clear()
        logger.debug("Cache closed")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            self.cleanup()

    # ── internals ───────────────────────────────────────────────────

    def _enforce_max_size(self) -> None:
        estimated = len(self._data) * CACHE_ENTRY_SIZE_ESTIMATE
        if estimated <= self._max_size:
            return
        to_remove = math.ceil(len(self._data) * 0.1)
        oldest = sorted(self._data.items(), key=lambda item: item[1].inserted_at)[:to_remove]
        for key, _ in oldest:
            del self._data[key]
        logger.debug("Cache size limit reached, removed %d oldest entries", len(oldest))


# ── key helpers ──────────────────────────────────────────────────────────


def package_info_key(
    package_name: str,
    version: Optional[str] = None,
    include_dependencies: bool = True,
) -> str:
    deps = "deps" if include_dependencies else "nodeps"
    return f"pkg_info:{package_name}:{version or 'latest'}:{deps}"


def package_readme_key(
    package_name: str,
    version: Optional[str] = None,
    include_examples: bool = True,
) -> str:
    examples = "examples" if include_examples else "noexamples"
    return f"pkg_readme:{package_name}:{version or 'latest'}:{examples}"


def search_key(query: str, limit: int) -> str:
    # Hash the full query; prefixes of long queries must not share a key.
    query_hash = hashlib.sha256(query.encode("utf-8")).hexdigest()[:16]
    return f"search:{query_hash}:{limit}"


def values_key(package_name: str, version: Optional[str] = None) -> str:
    return f"pkg_values:{package_name}:{version or 'latest'}"
