"""Bounded retry with linear backoff around model calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from .errors import RETRYABLE_ERRORS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_before_sleep(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Model call attempt {retry_state.attempt_number} failed: {error}. "
        f"Retrying in {delay:.1f}s"
    )


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int,
    base_delay_ms: int,
    *,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Call ``fn`` up to ``max_retries + 1`` times.

    The delay before retry ``i`` is ``base_delay_ms * i``. Only errors in
    ``retry_on`` trigger another attempt; anything else propagates at once.
    After the last attempt the last error is re-raised unchanged.

    Args:
        fn: Zero-argument coroutine function performing one attempt
        max_retries: Number of retries after the first attempt
        base_delay_ms: Linear backoff step in milliseconds
        retry_on: Exception types worth retrying
        sleep: Awaitable sleep used between attempts

    Returns:
        Result of the first successful attempt
    """
    step = base_delay_ms / 1000
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_incrementing(start=step, increment=step),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_before_sleep,
        sleep=sleep,
        reraise=True,
    )

    async def attempt() -> T:
        return await fn()

    return await retrying(attempt)
