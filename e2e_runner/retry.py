"""Retrying of assertions that only hold once the page has settled."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


async def auto_retry(
    assertion: Callable[[], T | Awaitable[T]],
    *,
    timeout: float = 5.0,
    interval: float = 0.1,
) -> T:
    """Call ``assertion`` until it stops raising or ``timeout`` seconds pass.

    Args:
        assertion: Sync or async callable that raises while the condition
                   does not hold yet
        timeout: Seconds after which the last error is re-raised
        interval: Seconds to sleep between attempts

    Returns:
        Whatever the first successful call returned

    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    attempt = 0
    while True:
        attempt += 1
        try:
            result = assertion()
            if inspect.isawaitable(result):
                return await result
            return result
        except Exception as e:
            if loop.time() >= deadline:
                raise
            log.debug("Attempt %d failed, retrying: %s", attempt, e)
        await asyncio.sleep(interval)
