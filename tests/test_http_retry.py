"""Tests for HTTP error classification and the retry loop."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from helm_readme_mcp.errors import (
    NetworkError,
    PackageNotFoundError,
    RateLimitError,
    ValidationError,
)
from helm_readme_mcp.registry.http import (
    backoff_delay,
    classify_http_error,
    is_retryable,
    parse_retry_after,
    with_retry,
)


class TestClassifyHttpError:
    def test_404(self):
        err = classify_http_error(404, {}, "bitnami/nginx")
        assert isinstance(err, PackageNotFoundError)
        assert err.status_code == 404

    def test_429_with_retry_after(self):
        err = classify_http_error(429, {"retry-after": "7"}, "Artifact Hub")
        assert isinstance(err, RateLimitError)
        assert err.retry_after == 7.0
        assert err.to_dict()["details"] == {"retry_after": 7.0}

    @pytest.mark.parametrize("status", [401, 403, 500, 503, 418])
    def test_network_errors_keep_status(self, status):
        err = classify_http_error(status, {}, "ctx", "Reason")
        assert isinstance(err, NetworkError)
        assert err.status_code == status

    def test_retry_after_ignores_http_dates(self):
        assert parse_retry_after({"retry-after": "Wed, 21 Oct 2015 07:28:00 GMT"}) is None


class TestIsRetryable:
    def test_transient(self):
        assert is_retryable(NetworkError("Request timeout"))
        assert is_retryable(NetworkError("Server error", status_code=502))
        assert is_retryable(RateLimitError("x"))
        assert is_retryable(RateLimitError("x", retry_after=5))

    def test_final(self):
        assert not is_retryable(PackageNotFoundError("a/b"))
        assert not is_retryable(ValidationError("bad"))
        assert not is_retryable(NetworkError("Access forbidden", status_code=403))
        assert not is_retryable(RateLimitError("x", retry_after=3600))

    def test_backoff_grows_with_bounded_jitter(self):
        for attempt, base in ((1, 1.0), (2, 2.0), (3, 4.0)):
            delay = backoff_delay(attempt, 1.0)
            assert base <= delay <= base * 1.1


class TestWithRetry:
    @pytest.mark.anyio
    async def test_two_timeouts_then_success(self):
        fn = AsyncMock(
            side_effect=[httpx.ReadTimeout("slow"), httpx.ConnectTimeout("slow"), "ok"]
        )
        sleep = AsyncMock()
        result = await with_retry(fn, attempts=3, base_delay=1.0, context="t", sleep=sleep)
        assert result == "ok"
        assert fn.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.anyio
    async def test_not_found_is_single_attempt(self):
        fn = AsyncMock(side_effect=PackageNotFoundError("a/b"))
        sleep = AsyncMock()
        with pytest.raises(PackageNotFoundError):
            await with_retry(fn, attempts=3, context="t", sleep=sleep)
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.anyio
    async def test_budget_exhausted_raises_last_error(self):
        fn = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        sleep = AsyncMock()
        with pytest.raises(NetworkError, match="Request timeout") as exc_info:
            await with_retry(fn, attempts=3, context="t", sleep=sleep)
        assert fn.await_count == 3
        assert sleep.await_count == 2
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    @pytest.mark.anyio
    async def test_rate_limit_uses_retry_after(self):
        fn = AsyncMock(side_effect=[RateLimitError("x", retry_after=4), "ok"])
        sleep = AsyncMock()
        assert await with_retry(fn, attempts=3, base_delay=1.0, context="t", sleep=sleep) == "ok"
        sleep.assert_awaited_once_with(4)

    @pytest.mark.anyio
    async def test_unknown_exception_wrapped(self):
        fn = AsyncMock(side_effect=ValueError("boom"))
        sleep = AsyncMock()
        with pytest.raises(NetworkError, match="boom"):
            await with_retry(fn, attempts=2, context="t", sleep=sleep)
        assert fn.await_count == 2
