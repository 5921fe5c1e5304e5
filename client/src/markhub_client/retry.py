"""Bounded retry with a fixed delay."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def retry_until(
    operation: Callable[[], Awaitable[Optional[T]]],
    *,
    attempts: int,
    delay_s: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    timeout_s: Optional[float] = None,
    clock: Optional[Callable[[], float]] = None,
) -> Optional[T]:
    """Run ``operation`` until it returns something other than None.

    Waits ``delay_s`` before every attempt and gives up after ``attempts``
    tries. With ``timeout_s`` it also gives up once that much time has
    passed on ``clock`` (the event loop's clock by default), however many
    attempts are left; slow attempts therefore cannot stretch the budget.

    Returns:
        The first non-None result, or None if every attempt came back empty.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    if delay_s < 0:
        raise ValueError("delay_s must be >= 0")
    if timeout_s is not None and timeout_s < 0:
        raise ValueError("timeout_s must be >= 0")
    now = clock or asyncio.get_running_loop().time
    deadline = None if timeout_s is None else now() + timeout_s
    for attempt in range(1, attempts + 1):
        await sleep(delay_s)
        result = await operation()
        if result is not None:
            return result
        logger.debug("Attempt %s/%s came back empty", attempt, attempts)
        if deadline is not None and now() >= deadline:
            logger.debug("Gave up after %s attempts: %ss elapsed", attempt, timeout_s)
            break
    return None
