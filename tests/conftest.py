"""
Shared fixtures for the suiterun test suite.

Provides common test fixtures including:
- Isolated registries so the process-wide registry stays clean
- Consoles writing to in-memory buffers
- Sample test modules for CLI runs
"""

from __future__ import annotations

import io
import sys
import uuid
from pathlib import Path
from typing import Callable, Generator

import pytest
from rich.console import Console

from suiterun.config import RunnerConfig
from suiterun.core import configure_logging
from suiterun.registry import TestRegistry, get_registry
from suiterun.reporter import ConsoleReporter
from suiterun.runner import Runner


# ==============================================================================
# Sample Test Modules
# ==============================================================================

SAMPLE_MATH_STR_MODULE = '''
from suiterun import registry
from suiterun.asserts import assert_equal, assert_str


@registry.test("Math", "Add")
def add():
    assert_equal(4, 2 + 2)


@registry.test("Math", "Sub")
def sub():
    assert_equal(5, 4)


@registry.skip("Str", "Concat")
def concat():
    assert_str("ab", "a" + "b")
'''

SAMPLE_FIXTURE_MODULE = '''
from suiterun import registry
from suiterun.asserts import assert_equal, log


@registry.data("Counter")
class CounterData:
    def __init__(self):
        self.value = 0


@registry.setup("Counter")
def counter_setup(data):
    data.value = 10


@registry.teardown("Counter")
def counter_teardown(data):
    log("teardown saw %d", data.value)


@registry.test2("Counter", "increment")
def increment(data):
    data.value += 1
    assert_equal(11, data.value)
'''

SAMPLE_BROKEN_MODULE = '''
from suiterun import registry


@registry.test2("NoData", "needs_data")
def needs_data(data):
    pass
'''

SAMPLE_SYNTAX_ERROR_MODULE = '''
from suiterun import registry


@registry.test("Broken")
def broken(:
    pass
'''

SAMPLE_RAISING_MODULE = '''
from suiterun import registry

raise ValueError("settings missing at import")
'''


# ==============================================================================
# Logging
# ==============================================================================

@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep structlog output out of captured stdout."""
    configure_logging("WARNING")


# ==============================================================================
# Registry Fixtures
# ==============================================================================

@pytest.fixture
def registry() -> TestRegistry:
    """A fresh, isolated registry."""
    return TestRegistry()


@pytest.fixture
def global_registry() -> Generator[TestRegistry, None, None]:
    """The process-wide registry, emptied before and after the test."""
    reg = get_registry()
    reg.clear()
    yield reg
    reg.clear()


# ==============================================================================
# Output Fixtures
# ==============================================================================

@pytest.fixture
def output() -> io.StringIO:
    """In-memory stream the console writes to."""
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    """A non-terminal console, so output carries no colour codes."""
    return Console(file=output, highlight=False, soft_wrap=True, width=200)


@pytest.fixture
def make_runner(
    registry: TestRegistry, console: Console
) -> Callable[..., Runner]:
    """Factory for runners bound to the isolated registry and console."""

    def _make(**config_overrides) -> Runner:
        config = RunnerConfig(**config_overrides)
        reporter = ConsoleReporter(console=console, color=False)
        return Runner(registry, config=config, reporter=reporter)

    return _make


def output_lines(output: io.StringIO) -> list[str]:
    """Non-empty lines written so far."""
    return [line for line in output.getvalue().splitlines() if line]


# ==============================================================================
# Module Fixtures
# ==============================================================================

@pytest.fixture
def write_module(
    tmp_path: Path, global_registry: TestRegistry
) -> Generator[Callable[[str], str], None, None]:
    """
    Write a test module under tmp_path and return its unique import name.

    Imported modules are dropped from sys.modules afterwards.
    """
    written: list[str] = []

    def _write(source: str) -> str:
        name = f"sample_{uuid.uuid4().hex[:12]}"
        (tmp_path / f"{name}.py").write_text(source)
        written.append(name)
        return name

    saved_path = list(sys.path)
    yield _write
    sys.path[:] = saved_path
    for name in written:
        sys.modules.pop(name, None)
