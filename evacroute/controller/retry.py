"""Retry with exponential backoff for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 5,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    After failed attempt i (0-based) the next attempt waits
    base_delay * 2**i seconds.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_attempts: Total attempts including the first
        base_delay: Delay in seconds after the first failure
        sleep: Awaitable sleep function (injectable for tests)

    Returns:
        The operation's result

    Raises:
        The exception of the last failed attempt
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            if attempt == max_attempts - 1:
                logger.error(f"Giving up after {max_attempts} attempts: {e}")
                raise
            delay = base_delay * 2 ** attempt
            logger.warning(f"Attempt {attempt + 1}/{max_attempts} failed ({e}), retrying in {delay:.2f}s...")
            await sleep(delay)

