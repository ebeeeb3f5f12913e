"""Exception hierarchy for the e2e runner."""

from collections.abc import Sequence
from pathlib import Path


class HarnessError(Exception):
    """Base class for all runner errors."""


class UsageError(HarnessError):
    """A test file misused the declaration API."""


class InvariantViolation(HarnessError):
    """An internal precondition of the runner was broken."""


class ServerStartError(HarnessError):
    """The server-under-test failed to start."""


class CaseTimeoutError(HarnessError, TimeoutError):
    """A test case did not settle within its allotted duration."""

    def __init__(self, timeout: float, description: str | None = None) -> None:
        message = f"Timeout after {humanize_time(timeout)}"
        if description is not None:
            message = f'the test "{description}" timed out: {message}'
        super().__init__(message)
        self.timeout = timeout
        self.description = description


class CaseThrewError(HarnessError):
    """A test case body raised, synchronously or asynchronously."""

    def __init__(self, description: str) -> None:
        super().__init__(f'the test "{description}" threw an error')
        self.description = description


class LogDetectedFailure(HarnessError):
    """No error was raised but the failure log holds a disqualifying entry."""


class ServerStopFailure(HarnessError):
    """The server emitted errors while shutting down."""


class SuiteAborted(HarnessError):
    """A final attempt failed in parallel CI; the suite must stop now."""

    def __init__(self, test_file: Path) -> None:
        super().__init__(f"Aborting: final attempt of {test_file} failed")
        self.test_file = test_file


class SuiteFailedError(HarnessError):
    """Aggregate error raised when test files still fail after retries."""

    def __init__(self, failed_files: Sequence[Path]) -> None:
        lines = [
            "Following test files failed, see all the logs printed above "
            "for more information.",
            *(f"  {test_file}" for test_file in failed_files),
        ]
        super().__init__("\n".join(lines))
        self.failed_files = tuple(failed_files)


def humanize_time(seconds: float) -> str:
    """Render a duration for humans (e.g. ``"250ms"``, ``"1.5 seconds"``)."""
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    if seconds < 120:
        value = round(seconds, 1)
        unit = "second" if value == 1 else "seconds"
        return f"{value:g} {unit}"
    minutes = round(seconds / 60, 1)
    return f"{minutes:g} minutes"
