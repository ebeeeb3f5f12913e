"""Build, load and run every test case of one test file."""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from pathlib import Path

from e2e_runner.browser import BrowserSession
from e2e_runner.builders.base import Builder
from e2e_runner.case_executor import run_case
from e2e_runner.context import FileExecutionContext
from e2e_runner.environment import Environment
from e2e_runner.errors import (
    CaseThrewError,
    CaseTimeoutError,
    HarnessError,
    InvariantViolation,
    LogDetectedFailure,
    ServerStartError,
    ServerStopFailure,
    UsageError,
)
from e2e_runner.failure_log import FailureLog
from e2e_runner.loader import load_test_module
from e2e_runner.models.declaration import RunDeclaration
from e2e_runner.models.log import LogEntry
from e2e_runner.models.result import FileResult, FileStatus
from e2e_runner.reporting import (
    log_case_result,
    log_failure,
    log_file_pass,
    log_file_skip,
)
from e2e_runner.server import ServerLifecycle

log = logging.getLogger(__name__)


def describe_log_failure(fail_on_warning: bool) -> str:
    """Name the kind of entries that failed a run."""
    return "error(s)/warning(s)" if fail_on_warning else "error(s)"


@dataclass(frozen=True, kw_only=True)
class FileExecutor:
    """Runs one test file end to end and converts failures into a result.

    File-level failures (server start, case errors, timeouts, log-detected
    failures, shutdown noise) never escape; usage errors and invariant
    violations do.
    """

    browser: BrowserSession
    builder: Builder
    environment: Environment
    failure_log: FailureLog
    default_case_timeout: float

    async def execute(
        self, test_file: Path, *, is_second_attempt: bool
    ) -> FileResult:
        """Run one attempt at ``test_file``.

        Args:
            test_file: Test file to run
            is_second_attempt: Whether this is the retry pass

        Returns:
            Outcome of the attempt

        """
        started = asyncio.get_running_loop().time()
        self.failure_log.clear()
        context = FileExecutionContext(
            test_file=test_file,
            log=self.failure_log,
            default_case_timeout=self.default_case_timeout,
        )

        try:
            log.debug("Building %s", test_file)
            artifact = await self.builder.build(test_file)
            try:
                await load_test_module(artifact.built_path, context)
            finally:
                artifact.dispose()

            status, failure, is_final_attempt = await self._run(
                context, is_second_attempt
            )
        finally:
            context.release()
            self.failure_log.clear()

        return FileResult(
            test_file=test_file,
            status=status,
            is_final_attempt=is_final_attempt,
            duration=asyncio.get_running_loop().time() - started,
            message=str(failure) if failure is not None else None,
        )

    async def _run(
        self, context: FileExecutionContext, is_second_attempt: bool
    ) -> tuple[FileStatus, HarnessError | None, bool]:
        if context.skipped is not None:
            self._assert_skip_usage(context)
            log_file_skip(context.test_file, context.skipped.reason, self.environment)
            return "skip", None, True

        declaration = context.run_declaration
        if declaration is None:
            raise InvariantViolation(
                f"{context.test_file} reached execution without run()"
            )

        is_final_attempt = is_second_attempt or not declaration.is_flaky
        server = ServerLifecycle(context=context, environment=self.environment)

        page = await self.browser.new_page(self.failure_log)
        context.attach_page(page)
        failure: HarnessError | None = None
        try:
            try:
                await server.start_or_fail()
            except ServerStartError as err:
                self._report(context, err, is_final_attempt, err.__cause__)
                failure = err
            else:
                failure = await self._run_cases(context, declaration, is_final_attempt)
        finally:
            stopped_cleanly = await server.stop_and_check(fail_on_warning=True)
            await page.close()

        if failure is None and not stopped_cleanly:
            failure = ServerStopFailure(
                f"{describe_log_failure(True)} occurred during server termination"
            )
            self._report(context, failure, is_final_attempt)

        if failure is not None:
            return "fail", failure, is_final_attempt

        log_file_pass(context.test_file, self.environment)
        return "pass", None, is_final_attempt

    async def _run_cases(
        self,
        context: FileExecutionContext,
        declaration: RunDeclaration,
        is_final_attempt: bool,
    ) -> HarnessError | None:
        """Run cases in registration order, stopping at the first failure."""
        if context.cases is None:
            raise InvariantViolation(
                f"{context.test_file} reached execution without test()"
            )

        fail_on_warning = declaration.effective_fail_on_warning

        for case in context.cases:
            self.failure_log.add(LogEntry(source="test()", text=case.description))

            err: Exception | None = None
            try:
                await run_case(case.body, declaration.case_timeout)
            except Exception as err_:
                err = err_
            log_case_result(case.description, err is not None, self.environment)

            try:
                await self._after_each(context, err is not None)
            except (UsageError, InvariantViolation):
                raise
            except Exception as hook_err:
                err = err or hook_err

            failure: HarnessError | None = None
            if isinstance(err, CaseTimeoutError):
                failure = CaseTimeoutError(err.timeout, description=case.description)
            elif err is not None:
                failure = CaseThrewError(case.description)
                failure.__cause__ = err
            elif self.failure_log.has_failures(fail_on_warning):
                failure = LogDetectedFailure(
                    f"{describe_log_failure(fail_on_warning)} occurred while "
                    f'running the test "{case.description}"'
                )

            if failure is not None:
                if isinstance(failure, CaseTimeoutError):
                    err = None
                self._report(context, failure, is_final_attempt, err)
                return failure

            self.failure_log.clear()

        return None

    async def _after_each(self, context: FileExecutionContext, errored: bool) -> None:
        if context.after_each_hook is None:
            return
        if inspect.isawaitable(done := context.after_each_hook(errored)):
            await done

    def _report(
        self,
        context: FileExecutionContext,
        failure: HarnessError,
        is_final_attempt: bool,
        err: BaseException | None = None,
    ) -> None:
        log_failure(
            context.test_file,
            str(failure),
            is_final_attempt,
            self.environment,
            err=err,
            entries=self.failure_log.drain_for_report(),
        )

    def _assert_skip_usage(self, context: FileExecutionContext) -> None:
        if context.run_declaration is not None:
            raise UsageError("You cannot call run() after calling skip()")
        if context.cases is not None:
            raise UsageError("You cannot call test() after calling skip()")
