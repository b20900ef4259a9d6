"""Tests for the bounded retry policy."""

from __future__ import annotations

from unittest.mock import AsyncMock, call

import pytest

from mockrig.errors import (
    FixtureStateError,
    RetryConfig,
    RetryExhaustedError,
    RetryPolicy,
)


class TestCalculateDelay:
    def test_exponential_doubles(self) -> None:
        policy = RetryPolicy(RetryConfig(max_attempts=8, base_delay=1.0))
        assert policy.delays() == [1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 64.0]
        assert policy.total_delay() == 127.0

    def test_custom_base_is_not_capped(self) -> None:
        policy = RetryPolicy(RetryConfig(max_attempts=4, base_delay=0.5, exponential_base=10.0))
        assert policy.delays() == [0.5, 5.0, 50.0]

    def test_single_attempt_never_sleeps(self) -> None:
        assert RetryPolicy(RetryConfig(max_attempts=1)).delays() == []

class TestExecuteAsync:
    @pytest.mark.asyncio
    async def test_returns_first_success(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(return_value="ok")
        result = await RetryPolicy().execute_async(operation)
        assert result == "ok"
        assert operation.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_until_success(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(side_effect=[OSError("refused"), OSError("refused"), "ok"])
        policy = RetryPolicy(RetryConfig(max_attempts=5, base_delay=1.0))

        assert await policy.execute_async(operation) == "ok"
        assert no_sleep.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_accepts_plain_callables(self, no_sleep: AsyncMock) -> None:
        assert await RetryPolicy().execute_async(lambda: 42) == 42

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_error(self, no_sleep: AsyncMock) -> None:
        errors = [OSError(f"refused {i}") for i in range(3)]
        operation = AsyncMock(side_effect=errors)
        policy = RetryPolicy(RetryConfig(max_attempts=3, base_delay=1.0))

        with pytest.raises(RetryExhaustedError) as exc_info:
            await policy.execute_async(operation)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is errors[-1]
        assert exc_info.value.cause is errors[-1]
        # No sleep after the final attempt
        assert no_sleep.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(side_effect=KeyError("boom"))
        policy = RetryPolicy(RetryConfig(max_attempts=5, retryable_exceptions=(OSError,)))

        with pytest.raises(KeyError):
            await policy.execute_async(operation)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_unrecoverable_mockrig_error_is_not_retried(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(side_effect=FixtureStateError(recoverable=False))

        with pytest.raises(FixtureStateError):
            await RetryPolicy(RetryConfig(max_attempts=5)).execute_async(operation)
        assert operation.await_count == 1
