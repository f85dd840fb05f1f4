"""Shared HTTP plumbing for the registry and GitHub clients.

Maps upstream status codes onto the error taxonomy in
:mod:`helm_readme_mcp.errors` and provides :func:`with_retry`, the
bounded exponential-backoff loop every outbound call goes through.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

import httpx

from helm_readme_mcp.constants import HTTP_RETRIES, HTTP_RETRY_BASE_DELAY
from helm_readme_mcp.errors import (
    HelmReadmeError,
    NetworkError,
    PackageNotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Longest Retry-After we are willing to sleep through inside one tool call.
MAX_RETRY_AFTER = 60.0

SleepFn = Callable[[float], Awaitable[Any]]


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """Return the ``Retry-After`` header in seconds, if it is numeric."""
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


def classify_http_error(
    status: int,
    headers: Mapping[str, str],
    context: str,
    reason: str = "",
) -> HelmReadmeError:
    """Build the exception for a non-2xx response (does not raise it)."""
    logger.error("HTTP Error %d in %s %s", status, context, reason)
    if status == 404:
        return PackageNotFoundError(context)
    if status == 429:
        return RateLimitError(context, parse_retry_after(headers))
    if status == 401:
        return NetworkError("Authentication failed", status_code=status)
    if status == 403:
        return NetworkError("Access forbidden", status_code=status)
    if 500 <= status < 600:
        return NetworkError(f"Server error ({status}): {reason}", status_code=status)
    return NetworkError(f"HTTP error ({status}): {reason}", status_code=status)


def raise_for_status(response: httpx.Response, context: str) -> None:
    if response.is_success:
        return
    raise classify_http_error(
        response.status_code,
        response.headers,
        context,
        response.reason_phrase,
    )


def wrap_transport_error(exc: Exception, context: str) -> HelmReadmeError:
    """Convert anything that escaped a request into the taxonomy."""
    if isinstance(exc, HelmReadmeError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return NetworkError(f"Request timeout ({context})", orig_exc=exc)
    if isinstance(exc, httpx.TransportError):
        return NetworkError(f"{type(exc).__name__} ({context}): {exc}", orig_exc=exc)
    return NetworkError(f"Unknown error in {context}: {exc}", orig_exc=exc)


def is_retryable(exc: BaseException) -> bool:
    """Transient failures: timeouts, transport errors, 5xx, rate limits.

    Not-found (404), validation and other 4xx errors are final.
    """
    if isinstance(exc, RateLimitError):
        return exc.retry_after is None or exc.retry_after <= MAX_RETRY_AFTER
    if isinstance(exc, NetworkError):
        return exc.status_code is None or exc.status_code >= 500
    return False


def backoff_delay(attempt: int, base_delay: float) -> float:
    """``base * 2**(attempt-1)`` plus up to 10% jitter."""
    delay = base_delay * (2 ** (attempt - 1))
    return delay + random.uniform(0, 0.1 * delay)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int = HTTP_RETRIES,
    base_delay: float = HTTP_RETRY_BASE_DELAY,
    context: str = "unknown",
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Run *fn* up to *attempts* times, backing off between transient failures.

    Exceptions outside the project taxonomy are wrapped into
    :class:`NetworkError` first.  Non-retryable errors propagate
    immediately; after the last attempt the final error propagates.
    """
    for attempt in range(1, attempts + 1):
        try:
            logger.debug("Attempting %s (attempt %d/%d)", context, attempt, attempts)
            result = await fn()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            err = wrap_transport_error(exc, context)
            final = not is_retryable(err)
            if final:
                logger.debug("Not retrying %s: %s", context, err.code)
            elif attempt == attempts:
                logger.error("%s failed after %d attempts: %s", context, attempts, err)
                final = True
            if final:
                if err is exc:
                    raise
                raise err from exc

            if isinstance(err, RateLimitError) and err.retry_after is not None:
                delay = err.retry_after
            else:
                delay = backoff_delay(attempt, base_delay)
            logger.warning(
                "%s failed on attempt %d/%d, retrying in %.0fms: %s",
                context,
                attempt,
                attempts,
                delay * 1000,
                err,
            )
            await sleep(delay)
        else:
            if attempt > 1:
                logger.info("%s succeeded on attempt %d", context, attempt)
            return result

    raise NetworkError(f"All retry attempts failed for {context}")
