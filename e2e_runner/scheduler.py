"""Two-pass retry policy across a set of test files."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from e2e_runner.environment import Environment
from e2e_runner.errors import SuiteAborted
from e2e_runner.file_executor import FileExecutor
from e2e_runner.models.result import FileResult

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class AttemptScheduler:
    """Runs every file once, then retries the failures once in CI."""

    executor: FileExecutor
    environment: Environment

    async def run(self, test_files: Sequence[Path]) -> Sequence[Path]:
        """Run all test files and return those still failing.

        Args:
            test_files: Files to run, in the order they are executed

        Returns:
            Files that failed their last attempt, in original order

        Raises:
            SuiteAborted: If a final attempt fails in parallel CI

        """
        if not test_files:
            log.info("No test files to run")
            return []

        log.info("Running %d test file(s)...", len(test_files))
        failed_first_attempt = await self._run_pass(test_files, is_second_attempt=False)

        if not failed_first_attempt or not self.environment.is_ci:
            return failed_first_attempt

        log.info(
            "Retrying %d failed test file(s): %s",
            len(failed_first_attempt),
            ", ".join(str(f) for f in failed_first_attempt),
        )
        return await self._run_pass(failed_first_attempt, is_second_attempt=True)

    async def _run_pass(
        self, test_files: Sequence[Path], *, is_second_attempt: bool
    ) -> Sequence[Path]:
        failed: list[Path] = []
        for test_file in test_files:
            result = await self.executor.execute(
                test_file, is_second_attempt=is_second_attempt
            )
            self._log_result(result, is_second_attempt)
            if result.passed:
                continue
            failed.append(test_file)
            if result.is_final_attempt and self.environment.is_parallel_ci:
                raise SuiteAborted(test_file)
        return failed

    def _log_result(self, result: FileResult, is_second_attempt: bool) -> None:
        log.debug(
            "Attempt %d finished: file=%s status=%s final=%s duration=%.1fs",
            2 if is_second_attempt else 1,
            result.test_file,
            result.status,
            result.is_final_attempt,
            result.duration,
        )
