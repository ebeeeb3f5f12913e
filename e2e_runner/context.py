"""Per-attempt execution context and the declaration API used by test files.

A test file receives its context through its ``define_tests`` entry point::

    def define_tests(t: FileExecutionContext) -> None:
        t.run_command(
            "python -m http.server 3000",
            ready_url="http://localhost:3000",
            stderr_severity="info",
        )

        @t.test("home page renders")
        async def _() -> None:
            await t.page.goto(t.server_url)
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias

from e2e_runner.errors import UsageError
from e2e_runner.failure_log import FailureLog, FailureLogHandler
from e2e_runner.models.declaration import (
    CaseBody,
    RunDeclaration,
    SkipDeclaration,
    TestCase,
)
from e2e_runner.models.log import Severity
from e2e_runner.process import ServerProcess, run_command_that_terminates

ServerHook: TypeAlias = Callable[[], object | Awaitable[object]]
AfterEachHook: TypeAlias = Callable[[bool], object | Awaitable[object]]


@dataclass(kw_only=True)
class FileExecutionContext:
    """Live state of the test file currently being executed.

    Exactly one context exists per file attempt. It is created by the file
    executor, handed to the test module and dropped when the attempt ends.
    """

    test_file: Path
    log: FailureLog
    default_case_timeout: float

    skipped: SkipDeclaration | None = field(default=None, init=False)
    run_declaration: RunDeclaration | None = field(default=None, init=False)
    cases: list[TestCase] | None = field(default=None, init=False)
    start_server: ServerHook | None = field(default=None, init=False)
    stop_server: ServerHook | None = field(default=None, init=False)
    after_each_hook: AfterEachHook | None = field(default=None, init=False)
    _page: Any = field(default=None, init=False, repr=False)
    _log_handlers: list[tuple[logging.Logger, logging.Handler]] = field(
        default_factory=list, init=False, repr=False
    )
    _edited_files: dict[Path, str] = field(
        default_factory=dict, init=False, repr=False
    )

    def skip(self, reason: str) -> None:
        """Declare that this file should not run."""
        if self.run_declaration is not None:
            raise UsageError("You cannot call skip() after calling run()")
        if self.skipped is not None:
            raise UsageError("You cannot call skip() twice")
        if self.cases is not None:
            raise UsageError("You cannot call skip() after calling test()")
        self.skipped = SkipDeclaration(reason=reason)

    def run(
        self,
        start_server: ServerHook,
        stop_server: ServerHook | None = None,
        *,
        is_flaky: bool = False,
        case_timeout: float | None = None,
        fail_on_warning: bool | None = None,
        server_url: str | None = None,
    ) -> None:
        """Declare that this file runs against a server started by the hooks."""
        if self.skipped is not None:
            raise UsageError("You cannot call run() after calling skip()")
        if self.run_declaration is not None:
            raise UsageError("You cannot call run() twice")
        self.run_declaration = RunDeclaration(
            is_flaky=is_flaky,
            case_timeout=(
                case_timeout if case_timeout is not None else self.default_case_timeout
            ),
            fail_on_warning=fail_on_warning,
            server_url=server_url,
        )
        self.start_server = start_server
        self.stop_server = stop_server

    def run_command(
        self,
        command: str,
        *,
        ready_message: str | None = None,
        ready_url: str | None = None,
        start_timeout: float = 60.0,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        is_flaky: bool = False,
        case_timeout: float | None = None,
        fail_on_warning: bool | None = None,
        server_url: str | None = None,
        stderr_severity: Severity = "error",
    ) -> ServerProcess:
        """Declare a run whose server is a shell command.

        The process output is captured into the failure log. stderr lines are
        recorded with ``stderr_severity``, so a server that logs requests to
        stderr can pass "info" to keep them from failing the run.
        """
        process = ServerProcess(
            command=command,
            log=self.log,
            ready_message=ready_message,
            ready_url=ready_url,
            start_timeout=start_timeout,
            cwd=cwd if cwd is not None else self.test_file.parent,
            env=env,
            stderr_severity=stderr_severity,
        )
        self.run(
            process.start,
            process.stop,
            is_flaky=is_flaky,
            case_timeout=case_timeout,
            fail_on_warning=fail_on_warning,
            server_url=server_url if server_url is not None else ready_url,
        )
        return process

    def test(
        self, description: str, body: CaseBody | None = None
    ) -> Callable[[CaseBody], CaseBody] | None:
        """Register a test case; usable directly or as a decorator."""
        if body is None:

            def decorator(fn: CaseBody) -> CaseBody:
                self.test(description, fn)
                return fn

            return decorator

        if self.skipped is not None:
            raise UsageError("You cannot call test() after calling skip()")
        if self.cases is None:
            self.cases = []
        self.cases.append(TestCase(description=description, body=body))
        return None

    def after_each(self, hook: AfterEachHook) -> None:
        """Register a hook called after every case with whether it errored."""
        self.after_each_hook = hook

    def expect_log(self, pattern: str, source: str | None = None) -> None:
        """Declare that log entries matching ``pattern`` are not failures.

        Expectations last until the next checkpoint, so call this from inside
        the test case that triggers the log.
        """
        self.log.expect(pattern, source=source)

    def capture_logging(self, *logger_names: str) -> None:
        """Record warnings and errors of the named loggers as failures.

        Without names the root logger is captured. The handlers stay attached
        until the attempt ends.
        """
        for name in logger_names or ("",):
            logger = logging.getLogger(name or None)
            handler = FailureLogHandler(self.log)
            logger.addHandler(handler)
            self._log_handlers.append((logger, handler))

    async def run_command_that_terminates(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float = 60.0,
    ) -> str:
        """Run a command to completion, relative to the test file by default."""
        return await run_command_that_terminates(
            command,
            self.log,
            cwd=cwd if cwd is not None else self.test_file.parent,
            env=env,
            timeout=timeout,
        )

    def edit_file(self, path: str | Path, replace: Callable[[str], str]) -> None:
        """Rewrite a file relative to the test file, remembering its content.

        Edits are reverted by ``edit_file_revert()`` or when the attempt ends.
        """
        target = self.test_file.parent / path
        content = target.read_text()
        self._edited_files.setdefault(target, content)
        target.write_text(replace(content))

    def edit_file_revert(self) -> None:
        """Restore every file changed by ``edit_file()``."""
        while self._edited_files:
            target, content = self._edited_files.popitem()
            target.write_text(content)

    def release(self) -> None:
        """Detach captured loggers and revert the file edits of this attempt."""
        while self._log_handlers:
            logger, handler = self._log_handlers.pop()
            logger.removeHandler(handler)
        self.edit_file_revert()

    @property
    def page(self) -> Any:
        """Browser page of the current file, available once the server starts."""
        if self._page is None:
            raise UsageError(
                "The page is only available inside test cases and server hooks"
            )
        return self._page

    def attach_page(self, page: Any) -> None:
        """Attach the browser page opened for this file."""
        self._page = page

    @property
    def server_url(self) -> str:
        """Base URL of the server-under-test as passed to ``run()``."""
        if self.run_declaration is None or self.run_declaration.server_url is None:
            raise UsageError("No server_url was passed to run()")
        return self.run_declaration.server_url
