"""Retry with exponential backoff.

The catalog download policy is short on purpose: three attempts waiting 1s
then 2s, after which the caller falls back to cached or built-in data.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[Exception, int, float], None]


@dataclass(frozen=True)
class BackoffPolicy:
    """When to give up and how long to wait between attempts.

    At least one of max_attempts and max_elapsed_time must be set.
    """

    max_attempts: Optional[int] = 3
    max_elapsed_time: Optional[float] = None
    initial_interval: float = 1.0
    max_interval: float = 8.0
    multiplier: float = 2.0

    def __post_init__(self):
        if self.max_attempts is None and self.max_elapsed_time is None:
            raise ValueError("Either max_attempts or max_elapsed_time must be set")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def interval(self, attempt: int) -> float:
        """Wait after the given failed attempt (1-based), before any time cap."""
        return min(
            self.initial_interval * self.multiplier ** (attempt - 1),
            self.max_interval,
        )

    def exhausted(self, attempt: int, elapsed: float) -> bool:
        if self.max_attempts is not None and attempt >= self.max_attempts:
            return True
        return self.max_elapsed_time is not None and elapsed >= self.max_elapsed_time


CATALOG_BACKOFF = BackoffPolicy()


async def retry_with_backoff(
    func: Callable[[], Union[T, Awaitable[T]]],
    policy: BackoffPolicy = CATALOG_BACKOFF,
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[RetryCallback] = None,
) -> T:
    """Call func until it succeeds or the policy gives up.

    Args:
        func: Sync or async callable taking no arguments
        policy: Attempt/time limits and wait schedule
        retryable_exceptions: Exception types worth another attempt
        on_retry: Optional callback(exception, attempt, wait)

    Returns:
        Result of the function

    Raises:
        The last exception once the policy is exhausted, or any exception
        not listed in retryable_exceptions
    """
    start = time.monotonic()
    attempt = 0

    while True:
        attempt += 1
        try:
            result: Any = func()
            if inspect.isawaitable(result):
                result = await result
            return result
        except retryable_exceptions as e:
            elapsed = time.monotonic() - start
            if policy.exhausted(attempt, elapsed):
                raise

            wait = policy.interval(attempt)
            if policy.max_elapsed_time is not None:
                wait = min(wait, policy.max_elapsed_time - elapsed)

            if on_retry:
                on_retry(e, attempt, wait)
            else:
                logger.debug(f"Attempt {attempt} failed: {e}. Retrying in {wait:.1f}s")

            if wait > 0:
                await asyncio.sleep(wait)
