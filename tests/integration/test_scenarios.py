"""
End-to-end scenarios through the module-level entry points.

Tests cover:
- Tests declared on the process-wide registry and run with main()
- Configuration discovered from the working directory
- Optional crash reporting, including a real fatal signal
"""

from __future__ import annotations

import faulthandler
import os
import signal
import subprocess
import sys
from pathlib import Path

import pytest

import suiterun
from suiterun.asserts import assert_equal, assert_str
from suiterun.crash import install_crash_handler, uninstall_crash_handler
from suiterun.registry import TestRegistry


@pytest.fixture
def declared(global_registry: TestRegistry) -> TestRegistry:
    """The (Math, Add) / (Math, Sub) / (Str, Concat) tests on the global registry."""

    @suiterun.registry.test("Math", "Add")
    def add():
        assert_equal(4, 2 + 2)

    @suiterun.registry.test("Math", "Sub")
    def sub():
        assert_equal(5, 4)

    @suiterun.registry.skip("Str", "Concat")
    def concat():
        assert_str("ab", "a" + "b")

    return global_registry


class TestMain:
    """Tests for suiterun.main."""

    def test_filter_from_argv(
        self,
        declared: TestRegistry,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.argv", ["mytests", "Math"])

        failed = suiterun.main()
        out = capsys.readouterr().out

        assert failed == 1
        assert "TEST 1/2 Math:Add [OK]" in out
        assert "TEST 2/2 Math:Sub [FAIL]" in out
        assert "RESULTS: 2 tests (1 ok, 1 failed, 0 skipped)" in out
        assert "Concat" not in out

    def test_explicit_argv_without_filter(
        self,
        declared: TestRegistry,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        monkeypatch.chdir(tmp_path)

        failed = suiterun.main(["mytests"])
        out = capsys.readouterr().out

        assert failed == 1
        assert "RESULTS: 3 tests (1 ok, 1 failed, 1 skipped)" in out

    def test_uses_discovered_config(
        self,
        declared: TestRegistry,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        (tmp_path / "suiterun.toml").write_text('color = "always"\n')
        monkeypatch.setenv("TERM", "xterm")
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.chdir(tmp_path)

        suiterun.main(["mytests", "Str"])
        out = capsys.readouterr().out

        assert "\x1b[" in out
        assert "Str:Concat" in out


@pytest.fixture
def restore_faulthandler():
    was_enabled = faulthandler.is_enabled()
    yield
    if was_enabled:
        faulthandler.enable(file=sys.__stderr__)


class TestCrashReporting:
    """Tests for the optional fatal signal handler."""

    def test_install_on_real_file(self, tmp_path: Path, restore_faulthandler):
        with open(tmp_path / "crash.log", "w") as stream:
            try:
                assert install_crash_handler(stream) is True
                assert faulthandler.is_enabled()
            finally:
                uninstall_crash_handler()
        assert not faulthandler.is_enabled()

    def test_stream_without_fileno(self):
        import io

        assert install_crash_handler(io.StringIO()) is False

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_process_dies_from_signal_after_report(self):
        script = (
            "import faulthandler\n"
            "from suiterun.core import configure_logging\n"
            "from suiterun.crash import install_crash_handler\n"
            "configure_logging('WARNING')\n"
            "assert install_crash_handler()\n"
            "faulthandler._sigsegv()\n"
        )
        src_dir = Path(suiterun.__file__).resolve().parent.parent
        python_path = [str(src_dir), os.environ.get("PYTHONPATH", "")]
        env = {**os.environ, "PYTHONPATH": os.pathsep.join(python_path)}

        result = subprocess.run(
            [sys.executable, "-c", script],
            capture_output=True,
            text=True,
            env=env,
            timeout=60,
        )

        assert result.returncode == -signal.SIGSEGV
        assert "Fatal Python error" in result.stdout
