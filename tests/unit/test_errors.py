"""Tests for runner errors."""

from pathlib import Path

import pytest

from e2e_runner.errors import (
    CaseThrewError,
    CaseTimeoutError,
    SuiteAborted,
    SuiteFailedError,
    humanize_time,
)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0.25, "250ms"),
        (1, "1 second"),
        (1.5, "1.5 seconds"),
        (60, "60 seconds"),
        (300, "5 minutes"),
    ],
)
def test_humanize_time(seconds: float, expected: str) -> None:
    """Durations are rendered in a readable unit."""
    assert humanize_time(seconds) == expected


def test_case_timeout_message() -> None:
    """The timeout names the case once it is known."""
    assert str(CaseTimeoutError(2)) == "Timeout after 2 seconds"
    assert str(CaseTimeoutError(2, description="login")) == (
        'the test "login" timed out: Timeout after 2 seconds'
    )


def test_case_threw_message() -> None:
    """The error names the failing case."""
    assert str(CaseThrewError("login")) == 'the test "login" threw an error'


def test_suite_aborted_message() -> None:
    """The abort names the file that triggered it."""
    assert str(SuiteAborted(Path("a.e2e.py"))) == (
        "Aborting: final attempt of a.e2e.py failed"
    )


def test_suite_failed_lists_files() -> None:
    """The aggregate error lists every failed file."""
    err = SuiteFailedError([Path("a.e2e.py"), Path("b/c.e2e.py")])

    assert str(err).splitlines() == [
        "Following test files failed, see all the logs printed above for more "
        "information.",
        "  a.e2e.py",
        "  b/c.e2e.py",
    ]
    assert err.failed_files == (Path("a.e2e.py"), Path("b/c.e2e.py"))
