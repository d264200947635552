"""Retry utilities for async operations.

Provides exponential backoff retry logic for transient failures of outbound
calls (push gateway). Datastore operations are never retried here.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.2  # seconds
DEFAULT_MAX_DELAY = 5.0  # seconds


def _calculate_delay(
    attempt: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Exponential backoff delay for a zero-indexed attempt, capped at max_delay."""
    return min(max_delay, base_delay * (2**attempt))


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> T:
    """Execute async function with exponential backoff retry.

    Args:
        fn: Async function to execute (typically a lambda or partial)
        attempts: Maximum number of attempts
        exceptions: Tuple of exception types to catch and retry
        base_delay: Base delay in seconds for exponential backoff
        max_delay: Upper bound for a single delay

    Returns:
        Result from successful function execution

    Raises:
        The last exception if all attempts fail
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return await fn()
        except exceptions as e:
            last_error = e
            if attempt < attempts - 1:
                delay = _calculate_delay(attempt, base_delay, max_delay)
                logger.debug(
                    "Attempt %d/%d failed (%s), retrying in %.2fs",
                    attempt + 1,
                    attempts,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)

    raise last_error  # type: ignore[misc]
