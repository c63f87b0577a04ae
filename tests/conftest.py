import os
import sys
from collections.abc import Iterator

import pytest

# Measure the run when launched under `coverage` with COVERAGE_PROCESS_START set.
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()


@pytest.fixture(autouse=True)  # type: ignore[misc]
def restore_recursion_limit() -> Iterator[None]:
    """Interpreter raises the host recursion limit; undo it after each test."""
    limit = sys.getrecursionlimit()
    yield
    sys.setrecursionlimit(limit)
