"""Fixtures for unit tests of the execution pipeline."""

import pytest

from e2e_runner.environment import Environment
from e2e_runner.failure_log import FailureLog
from e2e_runner.file_executor import FileExecutor
from e2e_runner.testing.fakes import FakeBrowser, RecordingBuilder


@pytest.fixture
def failure_log() -> FailureLog:
    """Create an empty failure log."""
    return FailureLog()


@pytest.fixture
def browser() -> FakeBrowser:
    """Create a fake browser session."""
    return FakeBrowser()


@pytest.fixture
def builder() -> RecordingBuilder:
    """Create a builder that loads files in place."""
    return RecordingBuilder()


@pytest.fixture
def environment() -> Environment:
    """Local, non-CI environment."""
    return Environment()


@pytest.fixture
def executor(
    browser: FakeBrowser,
    builder: RecordingBuilder,
    environment: Environment,
    failure_log: FailureLog,
) -> FileExecutor:
    """Create a file executor wired to fakes."""
    return FileExecutor(
        browser=browser,
        builder=builder,
        environment=environment,
        failure_log=failure_log,
        default_case_timeout=1.0,
    )
