"""
Assertion primitives.

Each check compares values and, on mismatch, reports
"<file>:<line>  <diagnostic>" through the failure capture, aborting the
running test. The location is that of the caller.
"""

from __future__ import annotations

import sys
from typing import Any

from suiterun.capture import err, fail, log

DEFAULT_TOLERANCE = 1e-4

__all__ = [
    "DEFAULT_TOLERANCE",
    "assert_data",
    "assert_dbl_far",
    "assert_dbl_near",
    "assert_equal",
    "assert_equal_u",
    "assert_fail",
    "assert_false",
    "assert_interval",
    "assert_not_equal",
    "assert_not_equal_u",
    "assert_not_null",
    "assert_null",
    "assert_str",
    "assert_true",
    "assert_wstr",
    "err",
    "log",
]


def _caller() -> str:
    # 0 = _caller, 1 = assert_*, 2 = the test
    frame = sys._getframe(2)
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"


def _text(value: str | bytes | None) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _strings_differ(exp: Any, real: Any) -> bool:
    if exp is None or real is None:
        return exp is not real
    return exp != real


def _unsigned(value: int) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"unsigned comparison given negative value {value}")
    return value


def assert_str(exp: str | bytes | None, real: str | bytes | None) -> None:
    """Two None values are equal; None never equals a string."""
    if _strings_differ(exp, real):
        fail(f"{_caller()}  expected '{_text(exp)}', got '{_text(real)}'")


def assert_wstr(exp: str | None, real: str | None) -> None:
    if _strings_differ(exp, real):
        fail(f"{_caller()}  expected '{_text(exp)}', got '{_text(real)}'")


def assert_data(exp: bytes, real: bytes) -> None:
    """
    Compare two binary buffers.

    A length mismatch is reported before any byte difference.
    """
    where = _caller()
    exp = bytes(exp)
    real = bytes(real)
    if len(exp) != len(real):
        fail(f"{where}  expected {len(exp)} bytes, got {len(real)}")
    for i, (e, r) in enumerate(zip(exp, real)):
        if e != r:
            fail(f"{where} expected 0x{e:02x} at offset {i} got 0x{r:02x}")


def assert_equal(exp: int, real: int) -> None:
    if exp != real:
        fail(f"{_caller()}  expected {exp}, got {real}")


def assert_equal_u(exp: int, real: int) -> None:
    exp, real = _unsigned(exp), _unsigned(real)
    if exp != real:
        fail(f"{_caller()}  expected {exp}, got {real}")


def assert_not_equal(exp: int, real: int) -> None:
    if exp == real:
        fail(f"{_caller()}  should not be {real}")


def assert_not_equal_u(exp: int, real: int) -> None:
    exp, real = _unsigned(exp), _unsigned(real)
    if exp == real:
        fail(f"{_caller()}  should not be {real}")


def assert_interval(exp1: int, exp2: int, real: int) -> None:
    """Inclusive range check, exp1 <= real <= exp2."""
    if real < exp1 or real > exp2:
        fail(f"{_caller()}  expected {exp1}-{exp2}, got {real}")


def assert_dbl_near(exp: float, real: float, tol: float = DEFAULT_TOLERANCE) -> None:
    diff = exp - real
    if abs(diff) > tol:
        fail(
            f"{_caller()}  expected {exp:0.3e}, got {real:0.3e} "
            f"(diff {diff:0.3e}, tol {tol:0.3e})"
        )


def assert_dbl_far(exp: float, real: float, tol: float = DEFAULT_TOLERANCE) -> None:
    diff = exp - real
    if abs(diff) <= tol:
        fail(
            f"{_caller()}  expected {exp:0.3e}, got {real:0.3e} "
            f"(diff {diff:0.3e}, tol {tol:0.3e})"
        )


def assert_null(real: Any) -> None:
    if real is not None:
        fail(f"{_caller()}  should be NULL")


def assert_not_null(real: Any) -> None:
    if real is None:
        fail(f"{_caller()}  should not be NULL")


def assert_true(real: Any) -> None:
    if not real:
        fail(f"{_caller()}  should be true")


def assert_false(real: Any) -> None:
    if real:
        fail(f"{_caller()}  should be false")


def assert_fail() -> None:
    fail(f"{_caller()}  shouldn't come here")
