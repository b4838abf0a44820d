"""
suiterun - In-process test registry and sequential runner

Tests register themselves when their module is imported; one call runs
them all and returns the number of failures.

    import sys

    import suiterun
    from suiterun import registry
    from suiterun.asserts import assert_equal

    @registry.test("Math", "add")
    def add():
        assert_equal(4, 2 + 2)

    if __name__ == "__main__":
        sys.exit(suiterun.main())
"""

__version__ = "0.1.0"
__author__ = "suiterun Contributors"

from suiterun.core import (
    SuiteRunError,
    ConfigurationError,
    RegistrationError,
    configure_logging,
)
from suiterun.config import RunnerConfig, load_config
from suiterun.capture import TestFailure, MessageBuffer, log, err
from suiterun.suite_index import Suite, SuiteIndex
from suiterun.registry import (
    Test,
    TestRegistry,
    get_registry,
    data,
    setup,
    skip,
    skip2,
    teardown,
    test,
    test2,
)
from suiterun.runner import (
    Outcome,
    Runner,
    RunSummary,
    TestResult,
    accept_all,
    main,
    run,
    suite_prefix,
)

__all__ = [
    "__version__",
    "__author__",
    "SuiteRunError",
    "ConfigurationError",
    "RegistrationError",
    "configure_logging",
    "RunnerConfig",
    "load_config",
    "TestFailure",
    "MessageBuffer",
    "log",
    "err",
    "Suite",
    "SuiteIndex",
    "Test",
    "TestRegistry",
    "get_registry",
    "data",
    "setup",
    "skip",
    "skip2",
    "teardown",
    "test",
    "test2",
    "Outcome",
    "Runner",
    "RunSummary",
    "TestResult",
    "accept_all",
    "main",
    "run",
    "suite_prefix",
]
