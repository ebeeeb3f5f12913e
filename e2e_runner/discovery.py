"""Discover test files below a root directory."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from pydantic import Field

from e2e_runner.models.base import Model

log = logging.getLogger(__name__)


class TestFilter(Model):
    """Select test files by substrings of their path."""

    __test__ = False

    terms: Sequence[str] = Field(
        default_factory=tuple, description="Substrings that must all appear"
    )
    exclude: bool = Field(default=False, description="Invert the selection")

    def matches(self, relative_path: str) -> bool:
        """Return whether a root-relative POSIX path is selected."""
        hit = all(term in relative_path for term in self.terms)
        return not hit if self.exclude else hit


def find_test_files(
    root: Path,
    pattern: str,
    exclude_dirs: Sequence[str] = (),
    test_filter: TestFilter | None = None,
) -> Sequence[Path]:
    """Find test files matching ``pattern`` below ``root``.

    Args:
        root: Directory to search
        pattern: Glob matched against file names (e.g. "*.e2e.py")
        exclude_dirs: Directory names that are never descended into
        test_filter: Optional filter on the root-relative path

    Returns:
        Matching files sorted by path

    """
    skipped_dirs = set(exclude_dirs)
    found: list[Path] = []

    for dirpath, dirnames, _ in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in skipped_dirs]
        for path in Path(dirpath).glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            if test_filter is not None and not test_filter.matches(relative):
                continue
            found.append(path)

    found.sort()
    log.info("Found %d test file(s) in %s", len(found), root)
    return found
