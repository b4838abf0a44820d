"""
Optional crash reporting.

Dumps a traceback when the process receives a fatal signal (SIGSEGV,
SIGFPE, SIGABRT, SIGBUS, SIGILL). faulthandler then re-delivers the signal,
so the process still terminates the way it would have without the handler.
"""

from __future__ import annotations

import faulthandler
import io
import sys
from typing import TextIO

import structlog

logger = structlog.get_logger(__name__)


def install_crash_handler(stream: TextIO | None = None) -> bool:
    """
    Enable fatal signal reporting on stream (stdout by default).

    Returns:
        True if the handler was installed, False if the stream has no
        usable file descriptor (for example when output is captured).
    """
    stream = stream if stream is not None else sys.stdout
    try:
        faulthandler.enable(file=stream, all_threads=False)
    except (AttributeError, ValueError, io.UnsupportedOperation) as e:
        logger.warning("Crash reporting unavailable", reason=str(e))
        return False
    logger.debug("Crash reporting enabled")
    return True


def uninstall_crash_handler() -> None:
    faulthandler.disable()
