"""Models for side-channel log output captured during a run."""

from dataclasses import dataclass
from typing import Literal, TypeAlias

Severity: TypeAlias = Literal["info", "warning", "error"]


@dataclass(frozen=True, kw_only=True)
class LogEntry:
    """One line of output captured from the browser, the server or logging."""

    source: str
    text: str
    severity: Severity = "info"

    def __str__(self) -> str:
        return f"[{self.source}][{self.severity}] {self.text}"
