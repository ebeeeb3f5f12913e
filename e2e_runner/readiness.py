"""HTTP readiness polling for servers-under-test."""

import asyncio
import logging

import aiohttp

log = logging.getLogger(__name__)


async def wait_until_ready(
    url: str,
    timeout: float = 60,
    poll_interval: float = 0.25,
) -> None:
    """Poll ``url`` until it answers with a non-5xx status.

    Args:
        url: URL to poll
        timeout: Maximum wait time in seconds
        poll_interval: Seconds between requests

    Raises:
        TimeoutError: If the server does not answer within timeout

    """
    deadline = asyncio.get_running_loop().time() + timeout
    request_timeout = aiohttp.ClientTimeout(total=max(poll_interval, 1.0))

    async with aiohttp.ClientSession(timeout=request_timeout) as session:
        while True:
            try:
                async with session.get(url) as response:
                    if response.status < 500:
                        log.debug("Server at %s is ready (%d)", url, response.status)
                        return
                    log.debug("Server at %s answered %d", url, response.status)
            except (aiohttp.ClientError, TimeoutError) as err:
                log.debug("Server at %s not reachable yet: %s", url, err)

            if asyncio.get_running_loop().time() >= deadline:
                raise TimeoutError(
                    f"Server at {url} not ready within {timeout} seconds"
                )

            await asyncio.sleep(poll_interval)
