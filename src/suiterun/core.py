"""
suiterun Core Utilities

Shared exceptions and logging setup for the suiterun package.
"""

import logging
import sys

import structlog


class SuiteRunError(Exception):
    """Base exception for suiterun errors."""

    pass


class ConfigurationError(SuiteRunError):
    """Raised when there's a configuration problem."""

    pass


class RegistrationError(SuiteRunError):
    """Raised when a test, suite or fixture declaration is invalid."""

    pass


LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str = "WARNING") -> None:
    """
    Configure structlog for a run.

    Log lines go to stderr so they never interleave with the test report,
    which is written to stdout.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR

    Raises:
        ConfigurationError: If the level name is unknown

    Example:
        >>> configure_logging("DEBUG")
    """
    try:
        log_level = LOG_LEVELS[level.upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown log level: {level}")

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def format_duration_ms(seconds: float) -> int:
    """
    Convert an elapsed wall-clock duration to whole milliseconds.

    Args:
        seconds: Duration in seconds

    Returns:
        Milliseconds, truncated toward zero

    Example:
        >>> format_duration_ms(1.2345)
        1234
    """
    return int(seconds * 1000)
