"""Human-readable status lines for test files and cases."""

import logging
from collections.abc import Sequence
from pathlib import Path

from e2e_runner.environment import Environment
from e2e_runner.models.log import LogEntry

log = logging.getLogger("e2e_runner")

STATUS_SYMBOLS = {
    "pass": "✓",
    "fail": "✗",
    "skip": "⚠",
}

ASCII_SYMBOLS = {
    "pass": "[PASS]",
    "fail": "[FAIL]",
    "skip": "[SKIP]",
}


def _symbol(status: str, environment: Environment) -> str:
    symbols = STATUS_SYMBOLS if environment.is_tty else ASCII_SYMBOLS
    return symbols.get(status, "?")


def log_case_result(description: str, errored: bool, environment: Environment) -> None:
    """Log the one-line outcome of a single test case."""
    status = "fail" if errored else "pass"
    log.info("%s [test] %s", _symbol(status, environment), description)


def log_file_pass(test_file: Path, environment: Environment) -> None:
    """Log that every case of a file passed."""
    log.info("%s %s", _symbol("pass", environment), test_file)


def log_file_skip(test_file: Path, reason: str, environment: Environment) -> None:
    """Log that a file was skipped and why."""
    log.warning("%s %s skipped: %s", _symbol("skip", environment), test_file, reason)


def log_failure(
    test_file: Path,
    reason: str,
    is_final_attempt: bool,
    environment: Environment,
    err: BaseException | None = None,
    entries: Sequence[LogEntry] = (),
) -> None:
    """Log the failure block of a file: reason, error and captured log entries.

    Failures that will be retried are logged as warnings.
    """
    level = logging.ERROR if is_final_attempt else logging.WARNING
    framing = "FAILED"
    if not is_final_attempt:
        framing = "FAILED (flaky, will be retried in CI)"
    log.log(
        level,
        "%s %s %s because %s",
        _symbol("fail", environment),
        test_file,
        framing,
        reason,
        exc_info=err,
    )
    if entries:
        log.log(level, "Logs captured during the run:")
        for entry in entries:
            log.log(level, "  %s", entry)


def log_suite_summary(
    test_files: Sequence[Path], failed_files: Sequence[Path]
) -> None:
    """Log the final summary of a suite run."""
    log.info("=" * 80)
    log.info(
        "Test Files Summary: %d passed, %d failed",
        len(test_files) - len(failed_files),
        len(failed_files),
    )
    log.info("=" * 80)
    for test_file in failed_files:
        log.error("  %s", test_file)
