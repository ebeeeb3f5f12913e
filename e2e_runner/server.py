"""Start and stop the server-under-test declared by a test file."""

import inspect
import logging
from dataclasses import dataclass

from e2e_runner.context import FileExecutionContext
from e2e_runner.environment import Environment
from e2e_runner.errors import InvariantViolation, ServerStartError
from e2e_runner.models.log import LogEntry

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ServerLifecycle:
    """Runs the start/stop hooks of one file and checks shutdown noise."""

    context: FileExecutionContext
    environment: Environment

    async def start_or_fail(self) -> None:
        """Run the start hook.

        Raises:
            ServerStartError: If the hook raises; the cause is chained

        """
        if self.context.start_server is None:
            raise InvariantViolation("Server start requested without run()")
        try:
            if inspect.isawaitable(started := self.context.start_server()):
                await started
        except Exception as err:
            raise ServerStartError(
                f"an error occurred while starting the server: {err}"
            ) from err

    async def stop_and_check(self, fail_on_warning: bool = True) -> bool:
        """Run the stop hook and check the failure log for shutdown noise.

        An exception raised by the stop hook is recorded as an error entry.
        On Windows the log check is skipped because killing the process tree
        reliably writes spurious errors.

        Returns:
            True if the server stopped cleanly

        """
        if self.context.stop_server is not None:
            try:
                if inspect.isawaitable(stopped := self.context.stop_server()):
                    await stopped
            except Exception as err:
                log.debug(
                    "Stop hook of %s raised", self.context.test_file, exc_info=err
                )
                self.context.log.add(
                    LogEntry(
                        source="server stop",
                        text=f"{type(err).__name__}: {err}",
                        severity="error",
                    )
                )
                return False

        if self.environment.is_windows:
            return True
        return not self.context.log.has_failures(fail_on_warning)
