"""Server-under-test backed by a shell command."""

import asyncio
import logging
import os
import signal
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from e2e_runner.environment import IS_WINDOWS
from e2e_runner.failure_log import FailureLog
from e2e_runner.models.log import LogEntry, Severity
from e2e_runner.readiness import wait_until_ready

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ServerProcess:
    """Start and stop a server command, capturing its output as log entries."""

    command: str
    log: FailureLog
    ready_message: str | None = None
    ready_url: str | None = None
    start_timeout: float = 60.0
    stop_timeout: float = 10.0
    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    stderr_severity: Severity = "error"

    _process: asyncio.subprocess.Process | None = field(default=None, init=False)
    _readers: list[asyncio.Task[None]] = field(default_factory=list, init=False)
    _ready: asyncio.Event = field(default_factory=asyncio.Event, init=False)

    @property
    def returncode(self) -> int | None:
        """Exit code of the process, None while it runs or before start."""
        return self._process.returncode if self._process else None

    async def start(self) -> None:
        """Spawn the command and wait until it reports being ready.

        Raises:
            RuntimeError: If the command exits before it is ready
            TimeoutError: If it is not ready within start_timeout

        """
        log.info("Starting server: %s", self.command)
        self._ready.clear()
        self._process = await asyncio.create_subprocess_shell(
            self.command,
            cwd=self.cwd,
            env={**os.environ, **self.env} if self.env else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=not IS_WINDOWS,
        )
        assert self._process.stdout is not None
        assert self._process.stderr is not None
        self._readers = [
            asyncio.create_task(self._pump(self._process.stdout, "stdout", "info")),
            asyncio.create_task(
                self._pump(self._process.stderr, "stderr", self.stderr_severity)
            ),
        ]

        ready = asyncio.ensure_future(self._wait_ready())
        exited = asyncio.ensure_future(self._process.wait())
        try:
            done, _ = await asyncio.wait(
                {ready, exited},
                timeout=self.start_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            exited.cancel()

        if ready in done:
            ready.result()
            log.info("Server ready (pid=%d)", self._process.pid)
            return

        ready.cancel()
        if exited in done:
            raise RuntimeError(
                f"Server command exited with code {self._process.returncode} "
                f"before it was ready: {self.command}"
            )
        raise TimeoutError(
            f"Server command not ready within {self.start_timeout} seconds: "
            f"{self.command}"
        )

    async def stop(self) -> None:
        """Terminate the process and wait for its output to be drained."""
        if self._process is None:
            return

        if self._process.returncode is None:
            self._terminate()
            try:
                await asyncio.wait_for(self._process.wait(), self.stop_timeout)
            except TimeoutError:
                log.warning("Server did not stop in time, killing it")
                self._kill()
                await self._process.wait()
        elif self._process.returncode != 0:
            self.log.add(
                LogEntry(
                    source="server",
                    text=f"Server exited unexpectedly with code "
                    f"{self._process.returncode}",
                    severity="error",
                )
            )

        await asyncio.gather(*self._readers)
        self._readers = []
        self._process = None

    async def _wait_ready(self) -> None:
        if self.ready_message is not None:
            await self._ready.wait()
        if self.ready_url is not None:
            await wait_until_ready(self.ready_url, timeout=self.start_timeout)

    async def _pump(
        self, stream: asyncio.StreamReader, source: str, severity: Severity
    ) -> None:
        async for raw in stream:
            text = raw.decode(errors="replace").rstrip()
            if not text:
                continue
            self.log.add(LogEntry(source=source, text=text, severity=severity))
            if (
                source == "stdout"
                and self.ready_message is not None
                and self.ready_message in text
            ):
                self._ready.set()

    def _terminate(self) -> None:
        assert self._process is not None
        try:
            if IS_WINDOWS:
                self._process.terminate()
            else:
                os.killpg(self._process.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass

    def _kill(self) -> None:
        assert self._process is not None
        try:
            if IS_WINDOWS:
                self._process.kill()
            else:
                os.killpg(self._process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass


async def run_command_that_terminates(
    command: str,
    failure_log: FailureLog,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float = 60.0,
) -> str:
    """Run a command to completion, recording its output in the failure log.

    stdout lines are recorded as info and stderr lines as errors, so noise on
    stderr fails the case that ran the command.

    Returns:
        The decoded stdout of the command

    Raises:
        RuntimeError: If the command exits with a non-zero code
        TimeoutError: If it does not finish within timeout

    """
    log.info("Running command: %s", command)
    process = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        start_new_session=not IS_WINDOWS,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except TimeoutError:
        if IS_WINDOWS:
            process.kill()
        else:
            os.killpg(process.pid, signal.SIGKILL)
        await process.wait()
        raise TimeoutError(
            f"Command did not terminate within {timeout} seconds: {command}"
        ) from None

    output = stdout.decode(errors="replace")
    _record_lines(failure_log, output, "stdout", "info")
    _record_lines(failure_log, stderr.decode(errors="replace"), "stderr", "error")

    if process.returncode != 0:
        raise RuntimeError(
            f"Command exited with code {process.returncode}: {command}"
        )
    return output


def _record_lines(
    failure_log: FailureLog, output: str, source: str, severity: Severity
) -> None:
    for line in output.splitlines():
        if text := line.rstrip():
            failure_log.add(LogEntry(source=source, text=text, severity=severity))
