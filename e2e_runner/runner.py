"""Top-level driver of a suite run."""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias

from e2e_runner.browser import BrowserSession, PlaywrightBrowser
from e2e_runner.builders.base import Builder
from e2e_runner.builders.loading import load_builder
from e2e_runner.config import CONFIG_FILENAME, SuiteConfig, load_config
from e2e_runner.discovery import TestFilter, find_test_files
from e2e_runner.environment import Environment
from e2e_runner.errors import InvariantViolation, SuiteFailedError
from e2e_runner.failure_log import FailureLog
from e2e_runner.file_executor import FileExecutor
from e2e_runner.reporting import log_suite_summary
from e2e_runner.scheduler import AttemptScheduler

log = logging.getLogger(__name__)

BrowserFactory: TypeAlias = Callable[
    [SuiteConfig], AbstractAsyncContextManager[BrowserSession]
]


async def load_suite_config(config_path: Path | None = None) -> SuiteConfig:
    """Load the suite configuration, falling back to defaults.

    An explicitly given path must exist; the default ``e2e.yaml`` is optional.
    """
    if config_path is not None:
        return await load_config(config_path)
    try:
        return await load_config(Path.cwd() / CONFIG_FILENAME)
    except FileNotFoundError:
        log.info("No %s found, using default configuration", CONFIG_FILENAME)
        return SuiteConfig(root=Path.cwd())


@dataclass(frozen=True, kw_only=True)
class SuiteRunner:
    """Discovers test files and runs them with one shared browser session."""

    config: SuiteConfig
    environment: Environment
    browser_factory: BrowserFactory = PlaywrightBrowser.launch
    builder: Builder | None = None
    failure_log: FailureLog = field(default_factory=FailureLog)

    async def run(self, test_filter: TestFilter | None = None) -> None:
        """Run the suite.

        Raises:
            SuiteFailedError: If any test file still fails after retries
            SuiteAborted: If a final attempt failed in parallel CI

        """
        test_files = find_test_files(
            self.config.root,
            self.config.test_pattern,
            self.config.exclude_dirs,
            test_filter,
        )
        builder = self.builder or load_builder(self.config.builder)()

        async with self.browser_factory(self.config) as browser:
            executor = FileExecutor(
                browser=browser,
                builder=builder,
                environment=self.environment,
                failure_log=self.failure_log,
                default_case_timeout=self.config.case_timeout,
            )
            scheduler = AttemptScheduler(
                executor=executor, environment=self.environment
            )
            failed_files = await scheduler.run(test_files)

        log_suite_summary(test_files, failed_files)

        if failed_files:
            if not set(failed_files) <= set(test_files):
                raise InvariantViolation("Failing files were never discovered")
            raise SuiteFailedError(failed_files)
