"""Abstract base class for test file builders."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class BuildArtifact:
    """Result of building one test file.

    ``dispose`` removes whatever the build produced. It must be idempotent and
    safe to call even when the build only partially succeeded.
    """

    built_path: Path
    dispose: Callable[[], None]


class Builder(ABC):
    """Turns a test file into a module that can be loaded."""

    @abstractmethod
    async def build(self, source: Path) -> BuildArtifact:
        """Build ``source`` and return the artifact to load.

        Args:
            source: Path of the test file as discovered

        Returns:
            Artifact whose ``built_path`` points at a loadable Python file

        """
