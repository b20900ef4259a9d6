"""Bounded retry with exponential backoff.

Used by the readiness probe: attempt, on failure sleep
``base_delay * exponential_base ** attempt``, repeat until the attempt
budget runs out, then raise RetryExhaustedError carrying the last cause.

Example:
    >>> from mockrig.errors.retry import RetryPolicy, RetryConfig
    >>>
    >>> policy = RetryPolicy(RetryConfig(max_attempts=8, base_delay=1.0))
    >>> await policy.execute_async(lambda: client.status())
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from mockrig.errors.base import MockRigError, RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Total number of attempts, the first one included.
        base_delay: Delay before the first retry (seconds).
        exponential_base: Multiplier applied to the delay after each retry.
        retryable_exceptions: Tuple of exception types to retry on.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    exponential_base: float = 2.0
    retryable_exceptions: tuple[type[BaseException], ...] = (Exception,)


class RetryPolicy:
    """Retry policy with a fixed attempt budget."""

    def __init__(self, config: RetryConfig | None = None) -> None:
        self.config = config or RetryConfig()

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay after the given attempt number (0-indexed)."""
        return self.config.base_delay * (self.config.exponential_base**attempt)

    def delays(self) -> list[float]:
        """Delays slept between attempts when every attempt fails."""
        return [self.calculate_delay(attempt) for attempt in range(self.config.max_attempts - 1)]

    def total_delay(self) -> float:
        """Upper bound of time spent sleeping before giving up."""
        return sum(self.delays())

    def should_retry(self, exception: Exception) -> bool:
        """Determine if the operation should be retried."""
        if isinstance(exception, MockRigError) and not exception.recoverable:
            return False

        return isinstance(exception, self.config.retryable_exceptions)

    async def execute_async(self, operation: Callable[[], Awaitable[T] | T]) -> T:
        """Execute an async operation with retry logic.

        Raises:
            RetryExhaustedError: When every attempt failed. The last failure
                is kept as ``last_error``.
        """
        last_error: Exception | None = None

        for attempt in range(self.config.max_attempts):
            try:
                result: Any = operation()
                if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
                    return await result
                return result
            except Exception as e:
                last_error = e

                if not self.should_retry(e):
                    raise

                if attempt < self.config.max_attempts - 1:
                    delay = self.calculate_delay(attempt)
                    logger.warning(
                        f"Retry {attempt + 1}/{self.config.max_attempts - 1} "
                        f"after {delay:.2f}s due to: {e!r}"
                    )
                    await asyncio.sleep(delay)

        raise RetryExhaustedError(
            message=f"All {self.config.max_attempts} attempts exhausted",
            attempts=self.config.max_attempts,
            last_error=last_error,
        )
