"""Suite configuration loaded from e2e.yaml."""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, ValidationError

from e2e_runner.models.base import Model

CONFIG_FILENAME = "e2e.yaml"


class SuiteConfig(Model):
    """Suite-wide settings resolved before any test file runs."""

    root: Path = Field(default=Path("."), description="Directory searched for tests")
    test_pattern: str = Field(
        default="*.e2e.py", description="Glob matched against test file names"
    )
    exclude_dirs: Sequence[str] = Field(
        default=(".git", ".venv", "node_modules", "__pycache__"),
        description="Directory names never descended into",
    )
    builder: str = Field(default="copy", description="Builder entry point key")
    case_timeout: float = Field(
        default=60.0, gt=0, description="Default per-case timeout in seconds"
    )
    browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Playwright browser type"
    )
    headless: bool = Field(default=True, description="Run the browser headless")


async def load_config(config_path: Path) -> SuiteConfig:
    """Load and validate a suite configuration file.

    Relative ``root`` values are resolved against the file's directory.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Parsed suite configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the YAML is malformed, empty or fails validation

    """
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    content = await asyncio.to_thread(config_path.read_text)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {config_path}")

    try:
        config = SuiteConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config schema in {config_path}: {e}") from e

    if not config.root.is_absolute():
        config = config.model_copy(
            update={"root": (config_path.parent / config.root).resolve()}
        )
    return config
