"""Run a single test case body under a timeout."""

import asyncio
import inspect
import logging

from e2e_runner.errors import CaseTimeoutError
from e2e_runner.models.declaration import CaseBody

log = logging.getLogger(__name__)


async def run_case(body: CaseBody, timeout: float) -> None:
    """Invoke ``body`` and wait for it to settle within ``timeout`` seconds.

    Args:
        body: Zero-argument callable returning a value or an awaitable
        timeout: Maximum time in seconds the body may take to settle

    Raises:
        CaseTimeoutError: If the timeout elapses first. The body keeps running
            in the background; only its outcome is ignored.
        RuntimeError: If the body ended up cancelled while the runner itself
            was not.
        Exception: Whatever the body raised, synchronously or not.

    """
    result = body()
    if not inspect.isawaitable(result):
        return

    task = asyncio.ensure_future(result)
    done, _ = await asyncio.wait({task}, timeout=timeout)

    if task not in done:
        task.add_done_callback(_discard_late_outcome)
        raise CaseTimeoutError(timeout)

    current = asyncio.current_task()
    if task.cancelled() and (current is None or current.cancelling() == 0):
        raise RuntimeError("test case was cancelled")

    task.result()


def _discard_late_outcome(task: asyncio.Future[object]) -> None:
    """Retrieve the outcome of an abandoned case so asyncio does not report it."""
    if task.cancelled():
        return
    if (err := task.exception()) is not None:
        log.debug("Abandoned test case raised after its timeout: %r", err)
