"""Environment signals consumed by the runner."""

import os
import sys
from collections.abc import Mapping
from typing import TextIO

from pydantic import Field

from e2e_runner.models.base import Model

PARALLEL_CI_ENV = "E2E_PARALLEL_CI"

IS_WINDOWS = sys.platform == "win32"

_FALSY = {"", "0", "false", "no", "off"}


def _is_set(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() not in _FALSY


class Environment(Model):
    """Process environment as seen by the scheduler and the reporter."""

    is_ci: bool = Field(default=False, description="Enables the second attempt")
    is_parallel_ci: bool = Field(
        default=False, description="Enables fail-fast abort on final failures"
    )
    is_tty: bool = Field(default=False, description="Affects presentation only")
    is_windows: bool = Field(default=False, description="Skips post-stop log check")

    @classmethod
    def detect(
        cls,
        environ: Mapping[str, str] | None = None,
        stream: TextIO | None = None,
    ) -> "Environment":
        """Build the environment from variables, the output stream and the OS."""
        environ = os.environ if environ is None else environ
        stream = sys.stdout if stream is None else stream
        return cls(
            is_ci=_is_set(environ, "CI"),
            is_parallel_ci=_is_set(environ, PARALLEL_CI_ENV),
            is_tty=stream.isatty(),
            is_windows=IS_WINDOWS,
        )
