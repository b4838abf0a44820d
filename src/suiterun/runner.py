"""
Execution driver.

Runs every registered test that passes the filter, in registration order,
one at a time:

    setup(data) -> body(data) or body() -> teardown(data)

A failure anywhere in that sequence aborts the rest of it, teardown
included, and the test is recorded as failed. The next test starts from a
clean message buffer and is unaffected.

There is no timeout: a test that never returns hangs the run.
"""

from __future__ import annotations

import sys
import time
import traceback
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog
from rich.console import Console

from suiterun.capture import LEVEL_ERR, MessageBuffer, TestFailure, armed
from suiterun.config import RunnerConfig, load_config
from suiterun.core import configure_logging, format_duration_ms
from suiterun.crash import install_crash_handler
from suiterun.registry import Test, TestFilter, TestRegistry, get_registry
from suiterun.reporter import ConsoleReporter

logger = structlog.get_logger(__name__)


class Outcome(str, Enum):
    """Result of running a single test."""

    PASSED = "ok"
    FAILED = "fail"
    SKIPPED = "skipped"


@dataclass
class TestResult:
    """Outcome of one test in a run."""

    __test__ = False

    index: int
    test: Test
    outcome: Outcome
    message: str = ""


@dataclass
class RunState:
    """Mutable state of one driver invocation."""

    predicate: TestFilter
    buffer: MessageBuffer
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[TestResult] = field(default_factory=list)

    def record(self, result: TestResult) -> None:
        self.results.append(result)
        if result.outcome is Outcome.PASSED:
            self.passed += 1
        elif result.outcome is Outcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


@dataclass(frozen=True)
class RunSummary:
    """Counts and timing for a completed run."""

    total: int
    passed: int
    failed: int
    skipped: int
    elapsed_ms: int
    results: list[TestResult]

    @property
    def success(self) -> bool:
        return self.failed == 0


def accept_all(test: Test) -> bool:
    return True


def suite_prefix(prefix: str) -> TestFilter:
    """Filter accepting tests whose suite name starts with prefix."""
    encoded = prefix.encode("utf-8")

    def predicate(test: Test) -> bool:
        return test.suite_name.encode("utf-8").startswith(encoded)

    return predicate


def make_filter(suite_filter: str | None) -> TestFilter:
    if not suite_filter:
        return accept_all
    return suite_prefix(suite_filter)


def _error_location(exc: BaseException) -> str:
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "<unknown>"
    last = frames[-1]
    return f"{last.filename}:{last.lineno}"


class Runner:
    """
    Sequential test runner.

    Example:
        >>> runner = Runner()
        >>> summary = runner.run("Math")
        >>> summary.failed
        0
    """

    def __init__(
        self,
        registry: TestRegistry | None = None,
        config: RunnerConfig | None = None,
        reporter: ConsoleReporter | None = None,
        console: Console | None = None,
    ) -> None:
        self.registry = get_registry() if registry is None else registry
        self.config = config or RunnerConfig()
        self.reporter = reporter or ConsoleReporter.from_config(self.config, console)

    def selected(self, suite_filter: str | None = None) -> list[Test]:
        """Tests the filter would run, in run order."""
        return self.registry.select(make_filter(suite_filter))

    def run(self, suite_filter: str | None = None) -> RunSummary:
        """Run every selected test and print the report."""
        state = RunState(
            predicate=make_filter(suite_filter),
            buffer=MessageBuffer(self.config.message_buffer_size),
        )
        state.total = self.registry.count(state.predicate)

        for name in self.registry.duplicates():
            logger.debug("Duplicate test name, both will run", test=name)
        logger.info("Run started", total=state.total, suite_filter=suite_filter)

        started = time.perf_counter()
        index = 1
        for test in self.registry:
            if not state.predicate(test):
                continue
            state.record(self._run_one(index, state, test))
            index += 1
        elapsed_ms = format_duration_ms(time.perf_counter() - started)

        summary = RunSummary(
            total=state.total,
            passed=state.passed,
            failed=state.failed,
            skipped=state.skipped,
            elapsed_ms=elapsed_ms,
            results=state.results,
        )
        self.reporter.summary(summary)
        logger.info(
            "Run finished",
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            skipped=summary.skipped,
            elapsed_ms=elapsed_ms,
        )
        return summary

    def _run_one(self, index: int, state: RunState, test: Test) -> TestResult:
        buffer = state.buffer
        buffer.reset()
        self.reporter.test_started(index, state.total, test)

        if test.skip:
            self.reporter.test_skipped()
            return TestResult(index, test, Outcome.SKIPPED)

        with armed(buffer):
            outcome = self._execute(test, buffer)

        if outcome is Outcome.PASSED:
            self.reporter.test_passed()
        else:
            self.reporter.test_failed()
            logger.info("Test failed", test=test.full_name, location=test.location)
        if buffer:
            self.reporter.test_messages(buffer)
        return TestResult(index, test, outcome, buffer.getvalue())

    def _execute(self, test: Test, buffer: MessageBuffer) -> Outcome:
        suite = self.registry.suites.find(test.suite_name)
        try:
            if suite and suite.setup and test.has_data:
                suite.setup(test.data)
            if test.has_data:
                test.func(test.data)
            else:
                test.func()
            # Only reached when nothing above failed
            if suite and suite.teardown and test.has_data:
                suite.teardown(test.data)
        except TestFailure:
            return Outcome.FAILED
        except Exception as e:
            buffer.write(LEVEL_ERR, f"{_error_location(e)}  {type(e).__name__}: {e}")
            return Outcome.FAILED
        return Outcome.PASSED


def run(
    argv: Sequence[str] | None = None,
    *,
    registry: TestRegistry | None = None,
    config: RunnerConfig | None = None,
    console: Console | None = None,
) -> int:
    """
    Run the registered tests and return the number that failed.

    argv is the program's argument vector, program name first. With exactly
    one extra argument it is used as a suite-name prefix filter; otherwise
    every test runs. The result is meant to be the process exit status.
    """
    argv = sys.argv if argv is None else argv
    suite_filter = argv[1] if len(argv) == 2 else None

    config = config or RunnerConfig()
    configure_logging(config.log_level)
    if config.crash_report:
        install_crash_handler()

    runner = Runner(registry, config=config, console=console)
    return runner.run(suite_filter).failed


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for test programs.

    Discovers configuration in the working directory, then runs:

        if __name__ == "__main__":
            sys.exit(suiterun.main())
    """
    return run(argv, config=load_config())

