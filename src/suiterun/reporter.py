"""
Console reporting for test runs.

Writes the progress and result lines with rich. Test names and messages are
always printed as plain Text, never interpreted as markup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from suiterun.capture import LEVEL_LOG, MessageBuffer

if TYPE_CHECKING:
    from suiterun.config import RunnerConfig
    from suiterun.registry import Test
    from suiterun.runner import RunSummary

STYLE_OK = "bold green"
STYLE_FAIL = "bold red"
STYLE_SKIP = "bold yellow"
STYLE_LOG = "blue"
STYLE_ERR = "yellow"
STYLE_SUMMARY_OK = "green"
STYLE_SUMMARY_FAIL = "bold red"


def make_console(config: "RunnerConfig") -> Console:
    """Create the stdout console honouring the colour setting."""
    if config.color == "always":
        return Console(force_terminal=True, highlight=False, soft_wrap=True)
    if config.color == "never":
        return Console(no_color=True, highlight=False, soft_wrap=True)
    return Console(highlight=False, soft_wrap=True)


class ConsoleReporter:
    """
    Prints one line per test and a final summary.

    Output format:
        TEST 1/3 Math:add [OK]
        TEST 2/3 Math:sub [FAIL]
          ERR: tests.py:12  expected 5, got 4
        RESULTS: 3 tests (1 ok, 1 failed, 1 skipped) ran in 0 ms
    """

    def __init__(
        self,
        console: Console | None = None,
        color: bool | None = None,
        color_ok: bool = False,
    ) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.color = self.console.is_terminal if color is None else color
        self.color_ok = color_ok

    @classmethod
    def from_config(
        cls, config: "RunnerConfig", console: Console | None = None
    ) -> "ConsoleReporter":
        if console is None:
            console = make_console(config)
        if config.color == "auto":
            color = console.is_terminal
        else:
            color = config.color == "always"
        return cls(console=console, color=color, color_ok=config.color_ok)

    def _print(self, text: str, style: str | None = None, end: str = "\n") -> None:
        self.console.print(
            Text(text, style=style if self.color and style else ""),
            end=end,
            soft_wrap=True,
            highlight=False,
        )

    def _marker(self, label: str, style: str | None) -> None:
        self.console.print(
            Text.assemble(" ", (label, style if self.color and style else "")),
            soft_wrap=True,
            highlight=False,
        )

    def test_started(self, index: int, total: int, test: "Test") -> None:
        self._print(f"TEST {index}/{total} {test.suite_name}:{test.test_name}", end="")

    def test_skipped(self) -> None:
        self._marker("[SKIPPED]", STYLE_SKIP)

    def test_passed(self) -> None:
        self._marker("[OK]", STYLE_OK if self.color_ok else None)

    def test_failed(self) -> None:
        self._marker("[FAIL]", STYLE_FAIL)

    def test_messages(self, buffer: MessageBuffer) -> None:
        # A truncated line has no newline of its own; one is added regardless
        for message in buffer.messages:
            style = STYLE_LOG if message.level == LEVEL_LOG else STYLE_ERR
            self._print(message.line.rstrip("\n"), style)

    def summary(self, summary: "RunSummary") -> None:
        style = STYLE_SUMMARY_FAIL if summary.failed else STYLE_SUMMARY_OK
        self._print(
            f"RESULTS: {summary.total} tests ({summary.passed} ok, "
            f"{summary.failed} failed, {summary.skipped} skipped) "
            f"ran in {summary.elapsed_ms} ms",
            style,
        )

    def listing(self, tests: list["Test"]) -> None:
        for test in tests:
            marker = " [SKIPPED]" if test.skip else ""
            self._print(f"{test.suite_name}:{test.test_name}{marker}")
