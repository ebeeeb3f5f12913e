"""Shared fixtures for all tests."""

import textwrap
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Protocol

import pytest
from aioresponses import aioresponses as aioresponses_cls

PRELUDE = """\
from pathlib import Path

EVENTS = Path({events!r})


def record(event):
    with EVENTS.open("a") as f:
        f.write(event + "\\n")

"""


class WriteTestFileFn(Protocol):
    """Protocol for test file creation function."""

    def __call__(self, name: str, source: str) -> Path:
        """Write a test file below the temporary root and return its path."""


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def events_file(tmp_path: Path) -> Path:
    """File that test files append their events to, one per line."""
    return tmp_path / "events.txt"


@pytest.fixture
def read_events(events_file: Path) -> Callable[[], list[str]]:
    """Return a function reading the events recorded so far."""

    def _read() -> list[str]:
        if not events_file.exists():
            return []
        return events_file.read_text().splitlines()

    return _read


@pytest.fixture
def write_test_file(tmp_path: Path, events_file: Path) -> WriteTestFileFn:
    """Return a function writing e2e test files into the temporary root.

    Every file gets a ``record(event)`` helper appending to ``events_file``.
    """

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        prelude = PRELUDE.format(events=str(events_file))
        path.write_text(prelude + textwrap.dedent(source))
        return path

    return _write
