"""Bounded retry with exponential backoff."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    *,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    The wait before retry ``n`` (0-based) is ``initial_delay * 2 ** n``
    seconds. There is no jitter.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_retries: Total number of attempts
        initial_delay: Delay in seconds before the first retry
        should_retry: Predicate deciding whether an exception is worth retrying
        sleep: Awaitable sleep used between attempts

    Returns:
        The result of the first successful attempt

    Raises:
        The exception of the last attempt, unchanged
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    for attempt in range(max_retries):
        try:
            return await operation()
        except Exception as e:
            is_last = attempt == max_retries - 1
            if is_last or (should_retry is not None and not should_retry(e)):
                raise

            delay = initial_delay * 2 ** attempt
            logger.debug(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} failed "
                f"({type(e).__name__}: {e}), retrying in {delay:.3f}s"
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError("retry loop exited without a result")
