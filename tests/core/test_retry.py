"""Tests for neighborwatch/core/retry.py - backoff for outbound calls."""

import httpx
import pytest
from hypothesis import given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

from neighborwatch.core.retry import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    _calculate_delay,
    with_retry,
)


class TestCalculateDelay:
    def test_first_attempt_uses_base_delay(self):
        assert _calculate_delay(0) == DEFAULT_BASE_DELAY

    def test_doubles_per_attempt(self):
        assert _calculate_delay(1, base_delay=0.2) == 0.4
        assert _calculate_delay(2, base_delay=0.2) == 0.8

    def test_capped_at_max_delay(self):
        assert _calculate_delay(30) == DEFAULT_MAX_DELAY

    @hypothesis_settings(max_examples=50)
    @given(
        attempt=st.integers(min_value=0, max_value=20),
        base_delay=st.floats(min_value=0.01, max_value=1.0),
        max_delay=st.floats(min_value=0.5, max_value=10.0),
    )
    def test_never_exceeds_cap(self, attempt, base_delay, max_delay):
        """Property: delay = min(max_delay, base_delay * 2^attempt)."""
        delay = _calculate_delay(attempt, base_delay, max_delay)

        assert delay <= max_delay
        assert abs(delay - min(max_delay, base_delay * (2**attempt))) < 1e-9


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_returns_result_on_first_success(self):
        call_count = 0

        async def succeed():
            nonlocal call_count
            call_count += 1
            return "success"

        assert await with_retry(succeed) == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retries_transport_errors_then_succeeds(self):
        call_count = 0

        async def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise httpx.ConnectError("connection refused")
            return "delivered"

        result = await with_retry(
            flaky, exceptions=(httpx.TransportError,), base_delay=0.001
        )

        assert result == "delivered"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_raises_last_error_after_all_attempts(self):
        call_count = 0

        async def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError(f"error {call_count}")

        with pytest.raises(ValueError, match=f"error {DEFAULT_ATTEMPTS}"):
            await with_retry(always_fail, exceptions=(ValueError,), base_delay=0.001)

        assert call_count == DEFAULT_ATTEMPTS

    @pytest.mark.asyncio
    async def test_does_not_catch_unlisted_exceptions(self):
        call_count = 0

        async def raise_type_error():
            nonlocal call_count
            call_count += 1
            raise TypeError("not retryable")

        with pytest.raises(TypeError):
            await with_retry(
                raise_type_error, exceptions=(ValueError,), base_delay=0.001
            )

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        async def never_called():
            raise AssertionError("should not run")

        with pytest.raises(ValueError):
            await with_retry(never_called, attempts=0)
