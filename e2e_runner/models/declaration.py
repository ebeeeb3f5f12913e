"""Models for what a test file declares about itself."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from pydantic import Field

from e2e_runner.models.base import Model

CaseBody: TypeAlias = Callable[[], object | Awaitable[object]]


class RunDeclaration(Model):
    """Per-file configuration recorded when a file calls ``run()``."""

    is_flaky: bool = Field(
        default=False, description="Tolerate one failure and retry in CI"
    )
    case_timeout: float = Field(..., gt=0, description="Per-case timeout in seconds")
    fail_on_warning: bool | None = Field(
        default=None,
        description="Whether warning log entries fail a case (None means yes)",
    )
    server_url: str | None = Field(
        default=None, description="Base URL of the server-under-test"
    )

    @property
    def effective_fail_on_warning(self) -> bool:
        """Warnings fail a case unless the file explicitly opted out."""
        return self.fail_on_warning is not False


class SkipDeclaration(Model):
    """Recorded when a file calls ``skip()``."""

    reason: str = Field(..., description="Why the file is skipped")


@dataclass(frozen=True, kw_only=True)
class TestCase:
    """A single test case registered by a test file."""

    __test__ = False

    description: str
    body: CaseBody
