"""Build step plugins turning test files into loadable modules."""

from e2e_runner.builders.base import BuildArtifact, Builder
from e2e_runner.builders.builtin import CopyBuilder, InPlaceBuilder
from e2e_runner.builders.loading import (
    BuilderNotFoundError,
    InvalidBuilderError,
    load_builder,
)

__all__ = [
    "BuildArtifact",
    "Builder",
    "BuilderNotFoundError",
    "CopyBuilder",
    "InPlaceBuilder",
    "InvalidBuilderError",
    "load_builder",
]
