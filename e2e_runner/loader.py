"""Load built test modules under a fresh identity for every attempt."""

import importlib.util
import inspect
import logging
import sys
import uuid
from pathlib import Path
from types import ModuleType

from e2e_runner.context import FileExecutionContext
from e2e_runner.errors import UsageError

log = logging.getLogger(__name__)

ENTRY_POINT = "define_tests"


async def load_test_module(
    built_path: Path, context: FileExecutionContext
) -> ModuleType:
    """Execute a built test file and let it declare its tests on ``context``.

    The module gets a unique name and is only present in ``sys.modules`` while
    its body executes, so re-running a file never reuses stale module state.

    Raises:
        UsageError: If the module has no ``define_tests`` callable, declares
            neither ``run()`` nor ``skip()``, or runs without any test case

    """
    stem = built_path.stem.replace(".", "_")
    module_name = f"_e2e_test_{stem}_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, built_path)
    if spec is None or spec.loader is None:
        raise UsageError(f"Cannot load test file {context.test_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
        define_tests = getattr(module, ENTRY_POINT, None)
        if not callable(define_tests):
            raise UsageError(
                f"Test file {context.test_file} must define {ENTRY_POINT}(t)"
            )
        if inspect.isawaitable(declared := define_tests(context)):
            await declared
    finally:
        sys.modules.pop(module_name, None)

    if context.skipped is None and context.run_declaration is None:
        raise UsageError(f"Test file {context.test_file} must call run() or skip()")
    if context.run_declaration is not None and not context.cases:
        raise UsageError(f"Test file {context.test_file} calls run() without test()")

    log.debug("Loaded %s as %s", context.test_file, module_name)
    return module
