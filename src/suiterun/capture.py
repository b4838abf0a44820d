"""
Failure capture for running tests.

An assertion that fails writes a diagnostic into the shared message buffer
and raises TestFailure. The exception unwinds the rest of the test body up
to the driver, which records the test as failed. Teardown is only called on
the normal-return path, so a failed test never reaches it.

Only one buffer is armed at a time; the driver arms it before each test.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog

from suiterun.config import DEFAULT_MESSAGE_BUFFER_SIZE

logger = structlog.get_logger(__name__)

LEVEL_LOG = "LOG"
LEVEL_ERR = "ERR"


class TestFailure(BaseException):
    """
    Raised to abort the current test.

    Derives from BaseException so that a test body catching Exception
    cannot swallow its own failure.
    """

    __test__ = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Message:
    """One line written to a MessageBuffer."""

    level: str
    line: str


class MessageBuffer:
    """
    Bounded per-test diagnostic buffer.

    Lines are stored as "  <LEVEL>: <text>\\n". Once capacity is reached
    further text is cut off and `truncated` is set; writing never fails.
    Capacity counts UTF-8 bytes. One byte is reserved, matching a
    NUL-terminated buffer.
    """

    def __init__(self, capacity: int = DEFAULT_MESSAGE_BUFFER_SIZE) -> None:
        if capacity < 2:
            raise ValueError(f"capacity must be at least 2, got {capacity}")
        self.capacity = capacity
        self._messages: list[Message] = []
        self._used = 0
        self.truncated = False

    @property
    def remaining(self) -> int:
        return self.capacity - 1 - self._used

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def reset(self) -> None:
        self._messages.clear()
        self._used = 0
        self.truncated = False

    def write(self, level: str, text: str) -> int:
        """Append a line; returns the number of UTF-8 bytes kept."""
        line = f"  {level}: {text}\n"
        encoded = line.encode("utf-8")
        # A multi-byte character cut by the limit is dropped whole
        kept = encoded[: max(self.remaining, 0)].decode("utf-8", errors="ignore")
        size = len(kept.encode("utf-8"))
        if size < len(encoded):
            self.truncated = True
        if kept:
            self._messages.append(Message(level, kept))
            self._used += size
        return size

    def getvalue(self) -> str:
        return "".join(m.line for m in self._messages)

    def __len__(self) -> int:
        return self._used

    def __bool__(self) -> bool:
        return self._used > 0


_active: MessageBuffer | None = None


def active_buffer() -> MessageBuffer | None:
    """The buffer armed for the running test, if any."""
    return _active


@contextmanager
def armed(buffer: MessageBuffer) -> Iterator[MessageBuffer]:
    """Make buffer the capture target for the duration of the block."""
    global _active
    previous = _active
    _active = buffer
    try:
        yield buffer
    finally:
        _active = previous


def _format(fmt: str, args: tuple[Any, ...]) -> str:
    return fmt % args if args else fmt


def log(fmt: str, *args: Any) -> None:
    """
    Record an informational line for the current test.

    Logged lines are printed after the test's outcome whether it passes
    or fails.
    """
    text = _format(fmt, args)
    if _active is not None:
        _active.write(LEVEL_LOG, text)
    else:
        logger.info("Test log outside of a run", message=text)


def err(fmt: str, *args: Any) -> None:
    """Record an error line and abort the current test."""
    fail(_format(fmt, args))


def fail(message: str) -> None:
    """Write message to the armed buffer and raise TestFailure."""
    if _active is not None:
        _active.write(LEVEL_ERR, message)
    raise TestFailure(message)
