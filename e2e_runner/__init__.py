"""Execution engine for end-to-end test files."""

from e2e_runner.context import FileExecutionContext
from e2e_runner.errors import (
    CaseThrewError,
    CaseTimeoutError,
    InvariantViolation,
    LogDetectedFailure,
    ServerStartError,
    SuiteAborted,
    SuiteFailedError,
    UsageError,
)
from e2e_runner.retry import auto_retry

__all__ = [
    "CaseThrewError",
    "CaseTimeoutError",
    "FileExecutionContext",
    "InvariantViolation",
    "LogDetectedFailure",
    "ServerStartError",
    "SuiteAborted",
    "SuiteFailedError",
    "UsageError",
    "auto_retry",
]
