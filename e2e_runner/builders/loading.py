"""Resolution of the builder a suite is configured with."""

from importlib.metadata import EntryPoint, entry_points

from e2e_runner.builders.base import Builder

ENTRY_POINT_GROUP = "e2e_runner.builders"


class BuilderNotFoundError(Exception):
    """Raised when no builder is registered under a key."""


class InvalidBuilderError(TypeError):
    """Raised when an entry point does not resolve to a Builder subclass."""


def load_builder(key: str) -> type[Builder]:
    """Resolve a builder class by its entry-point key.

    Args:
        key: Name under the ``e2e_runner.builders`` group
             (e.g., "copy", "inplace")

    Returns:
        The builder class

    Raises:
        BuilderNotFoundError: If no builder is registered under the key
        InvalidBuilderError: If the entry point is not a Builder subclass

    """
    registered = {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}
    if key not in registered:
        raise BuilderNotFoundError(
            f"Builder '{key}' not found. Available builders: {sorted(registered)}"
        )
    return _checked(registered[key])


def _checked(entry: EntryPoint) -> type[Builder]:
    loaded = entry.load()
    if not (isinstance(loaded, type) and issubclass(loaded, Builder)):
        raise InvalidBuilderError(
            f"Entry point '{entry.name}' ({entry.value}) is not a Builder subclass"
        )
    return loaded
