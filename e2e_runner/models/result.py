"""Models for test file execution results."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

FileStatus: TypeAlias = Literal["pass", "fail", "skip"]


@dataclass(frozen=True, kw_only=True)
class FileResult:
    """Outcome of one attempt at one test file.

    Skipped files count as passing; they are never retried.
    """

    test_file: Path
    status: FileStatus
    is_final_attempt: bool
    duration: float = 0.0
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Return whether this attempt counts as a pass."""
        return self.status != "fail"
