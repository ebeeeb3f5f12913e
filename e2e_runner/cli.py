"""CLI entry point for the e2e runner."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from e2e_runner.discovery import TestFilter
from e2e_runner.environment import Environment
from e2e_runner.errors import SuiteAborted, SuiteFailedError
from e2e_runner.runner import SuiteRunner, load_suite_config


async def run(
    terms: Sequence[str] = (),
    exclude: bool = False,
    config_path: Path | None = None,
) -> int:
    """Run the suite and return exit code."""
    log = logging.getLogger("e2e_runner")

    config = await load_suite_config(config_path)
    environment = Environment.detect()
    log.info(
        "Environment: ci=%s parallel_ci=%s",
        environment.is_ci,
        environment.is_parallel_ci,
    )

    test_filter = TestFilter(terms=tuple(terms), exclude=exclude) if terms else None
    runner = SuiteRunner(config=config, environment=environment)

    try:
        await runner.run(test_filter)
    except SuiteFailedError as e:
        log.error("%s", e)
        return 1
    except SuiteAborted as e:
        log.error("%s", e)
        return 1

    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run end-to-end test files")
    parser.add_argument(
        "terms",
        nargs="*",
        help="Only run test files whose path contains every term",
    )
    parser.add_argument(
        "--exclude",
        action="store_true",
        help="Run test files whose path does not contain the terms instead",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the suite configuration (default: ./e2e.yaml)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(terms=args.terms, exclude=args.exclude, config_path=args.config)
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
