"""Builders shipped with the runner."""

import asyncio
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from e2e_runner.builders.base import BuildArtifact, Builder

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CopyBuilder(Builder):
    """Copy each test file into its own private build directory.

    Every attempt loads from a fresh path, so nothing cached for a previous
    attempt (bytecode, module objects) can leak into the next one.
    """

    build_root: Path | None = None

    async def build(self, source: Path) -> BuildArtifact:
        """Copy the source into a new temporary directory."""
        build_dir = Path(
            tempfile.mkdtemp(prefix=f"{source.stem}-", dir=self.build_root)
        )

        def dispose() -> None:
            shutil.rmtree(build_dir, ignore_errors=True)

        try:
            built_path = build_dir / source.name
            await asyncio.to_thread(shutil.copyfile, source, built_path)
        except BaseException:
            dispose()
            raise

        log.debug("Built %s -> %s", source, built_path)
        return BuildArtifact(built_path=built_path, dispose=dispose)


@dataclass(frozen=True, kw_only=True)
class InPlaceBuilder(Builder):
    """Load test files straight from their source location."""

    async def build(self, source: Path) -> BuildArtifact:
        """Return the source itself; there is nothing to clean up."""
        return BuildArtifact(built_path=source, dispose=lambda: None)
