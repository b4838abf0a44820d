"""
Test registry and self-registration decorators.

Declaring a test is enough to make it runnable: the decorators below
register the test when the module defining it is imported, before the
driver is called. Within a module, tests run in declaration order; across
modules the order follows import order.

Duplicate (suite, test) pairs are not rejected. Both are kept and both run.

Example:
    >>> from suiterun import registry
    >>> @registry.test("Math", "add")
    ... def add():
    ...     assert_equal(4, 2 + 2)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

from suiterun.core import RegistrationError
from suiterun.suite_index import DEFAULT_BUCKET_COUNT, Suite, SuiteIndex

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

TestFilter = Callable[["Test"], bool]


@dataclass(frozen=True, eq=False)
class Test:
    """One registered test case."""

    __test__ = False

    suite_name: str
    test_name: str
    func: Callable[..., None]
    data: Any = None
    skip: bool = False
    location: str = "<unknown>"

    @property
    def full_name(self) -> str:
        return f"{self.suite_name}:{self.test_name}"

    @property
    def has_data(self) -> bool:
        return self.data is not None


class TestRegistry:
    """
    Ordered sequence of tests plus the suite index they resolve against.

    Tests are appended in registration order and never removed, apart from
    clear() which exists for isolated use.
    """

    __test__ = False

    def __init__(self, suite_buckets: int = DEFAULT_BUCKET_COUNT) -> None:
        self._tests: list[Test] = []
        self.suites = SuiteIndex(suite_buckets)
        self.data_types: dict[str, type] = {}

    def add(self, test: Test) -> Test:
        self._tests.append(test)
        return test

    def select(self, predicate: TestFilter) -> list[Test]:
        return [t for t in self._tests if predicate(t)]

    def count(self, predicate: TestFilter) -> int:
        return sum(1 for t in self._tests if predicate(t))

    def duplicates(self) -> list[str]:
        """Names of (suite, test) pairs registered more than once."""
        seen: set[str] = set()
        dupes: list[str] = []
        for t in self._tests:
            if t.full_name in seen and t.full_name not in dupes:
                dupes.append(t.full_name)
            seen.add(t.full_name)
        return dupes

    def clear(self) -> None:
        self._tests.clear()
        self.suites.clear()
        self.data_types.clear()

    def __iter__(self) -> Iterator[Test]:
        return iter(list(self._tests))

    def __len__(self) -> int:
        return len(self._tests)


_default_registry = TestRegistry()


def get_registry() -> TestRegistry:
    """The process-wide registry used when no registry is passed."""
    return _default_registry


def _resolve(registry: TestRegistry | None) -> TestRegistry:
    return _default_registry if registry is None else registry


def _location(func: Callable[..., Any]) -> str:
    code = getattr(func, "__code__", None)
    if code is None:
        return "<unknown>"
    return f"{code.co_filename}:{code.co_firstlineno}"


def _check_name(kind: str, name: str) -> None:
    if not isinstance(name, str) or not name:
        raise RegistrationError(f"{kind} name must be a non-empty string, got {name!r}")


def _register(
    registry: TestRegistry | None,
    suite_name: str,
    test_name: str | None,
    func: Callable[..., None],
    *,
    skip: bool,
    with_data: bool,
) -> Test:
    registry = _resolve(registry)
    _check_name("Suite", suite_name)
    name = test_name or getattr(func, "__name__", None)
    _check_name("Test", name)

    data = None
    if with_data:
        data_type = registry.data_types.get(suite_name)
        if data_type is None:
            raise RegistrationError(
                f"No fixture data declared for suite '{suite_name}'; "
                f"declare it with @data('{suite_name}') before {name}"
            )
        data = data_type()

    return registry.add(
        Test(
            suite_name=suite_name,
            test_name=name,
            func=func,
            data=data,
            skip=skip,
            location=_location(func),
        )
    )


def _test_decorator(
    suite_name: str,
    test_name: str | None,
    registry: TestRegistry | None,
    *,
    skip: bool,
    with_data: bool,
) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        _register(registry, suite_name, test_name, func, skip=skip, with_data=with_data)
        return func

    return decorator


def test(
    suite_name: str, test_name: str | None = None, *, registry: TestRegistry | None = None
) -> Callable[[F], F]:
    """Register a test taking no arguments. The name defaults to the function name."""
    return _test_decorator(suite_name, test_name, registry, skip=False, with_data=False)


def skip(
    suite_name: str, test_name: str | None = None, *, registry: TestRegistry | None = None
) -> Callable[[F], F]:
    """Register a test taking no arguments that is reported but never run."""
    return _test_decorator(suite_name, test_name, registry, skip=True, with_data=False)


def test2(
    suite_name: str, test_name: str | None = None, *, registry: TestRegistry | None = None
) -> Callable[[F], F]:
    """
    Register a test taking the suite's fixture data.

    The test gets its own instance of the class declared with @data for the
    suite; the suite's setup and teardown hooks receive the same instance.
    """
    return _test_decorator(suite_name, test_name, registry, skip=False, with_data=True)


def skip2(
    suite_name: str, test_name: str | None = None, *, registry: TestRegistry | None = None
) -> Callable[[F], F]:
    return _test_decorator(suite_name, test_name, registry, skip=True, with_data=True)


def data(suite_name: str, *, registry: TestRegistry | None = None) -> Callable[[C], C]:
    """Declare the fixture data class of a suite."""

    def decorator(cls: C) -> C:
        _check_name("Suite", suite_name)
        _resolve(registry).data_types[suite_name] = cls
        return cls

    return decorator


def _fixture_decorator(
    suite_name: str, hook: str, registry: TestRegistry | None
) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        _check_name("Suite", suite_name)
        suites = _resolve(registry).suites
        suites.init_once()
        suite = suites.emplace(Suite(suite_name))
        setattr(suite, hook, func)
        return func

    return decorator


def setup(suite_name: str, *, registry: TestRegistry | None = None) -> Callable[[F], F]:
    """Register the setup hook of a suite, called with the fixture data before each test."""
    return _fixture_decorator(suite_name, "setup", registry)


def teardown(suite_name: str, *, registry: TestRegistry | None = None) -> Callable[[F], F]:
    """Register the teardown hook of a suite, called after each test that passes."""
    return _fixture_decorator(suite_name, "teardown", registry)


test.__test__ = False  # type: ignore[attr-defined]
test2.__test__ = False  # type: ignore[attr-defined]
