"""Shared buffer of side-channel log output used to detect silent failures.

Browser console errors, server stderr and Python logging records never raise
inside a test case. They are collected here and inspected at checkpoints
(after each case and after each file) to decide whether the run failed.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from e2e_runner.models.log import LogEntry, Severity

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class LogExpectation:
    """An entry a test file expects to see; matching entries are not failures."""

    pattern: re.Pattern[str]
    source: str | None = None

    def matches(self, entry: LogEntry) -> bool:
        """Return whether the entry is covered by this expectation."""
        if self.source is not None and entry.source != self.source:
            return False
        return self.pattern.search(entry.text) is not None


class FailureLog:
    """Append-only log buffer with severity queries."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._expectations: list[LogExpectation] = []

    @property
    def entries(self) -> Sequence[LogEntry]:
        """Entries currently buffered, in insertion order."""
        return tuple(self._entries)

    def add(self, entry: LogEntry) -> None:
        """Append an entry to the buffer."""
        log.debug("Captured %s", entry)
        self._entries.append(entry)

    def expect(
        self, pattern: str | re.Pattern[str], source: str | None = None
    ) -> None:
        """Mark entries matching ``pattern`` as expected until the next clear.

        A plain string is matched literally anywhere in the entry text.
        """
        if isinstance(pattern, str):
            pattern = re.compile(re.escape(pattern))
        self._expectations.append(LogExpectation(pattern=pattern, source=source))

    def has_failures(self, fail_on_warning: bool) -> bool:
        """Return whether the buffer holds an error, or a warning if asked."""
        return bool(self.failures(fail_on_warning))

    def failures(self, fail_on_warning: bool) -> Sequence[LogEntry]:
        """Return the unexpected entries that disqualify the run."""
        disqualifying: set[Severity] = {"error"}
        if fail_on_warning:
            disqualifying.add("warning")
        return [
            entry
            for entry in self._entries
            if entry.severity in disqualifying and not self._is_expected(entry)
        ]

    def drain_for_report(self) -> Sequence[LogEntry]:
        """Return every buffered entry in order and empty the buffer."""
        entries, self._entries = self._entries, []
        self._expectations.clear()
        return entries

    def clear(self) -> None:
        """Drop all entries and expectations."""
        self._entries.clear()
        self._expectations.clear()

    def _is_expected(self, entry: LogEntry) -> bool:
        return any(expectation.matches(entry) for expectation in self._expectations)


class FailureLogHandler(logging.Handler):
    """Forward Python logging records at WARNING and above into a FailureLog."""

    def __init__(self, failure_log: FailureLog, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self.failure_log = failure_log

    def emit(self, record: logging.LogRecord) -> None:
        try:
            severity: Severity = (
                "error" if record.levelno >= logging.ERROR else "warning"
            )
            self.failure_log.add(
                LogEntry(
                    source=f"logging:{record.name}",
                    text=self.format(record),
                    severity=severity,
                )
            )
        except Exception:
            self.handleError(record)
