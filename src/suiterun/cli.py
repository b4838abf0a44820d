"""
suiterun CLI

Imports the given test modules, which registers their tests, then runs them:

    suiterun -i tests.math_tests -i tests.str_tests Math

The exit status is the number of failed tests, capped at 255.
"""

import importlib
import sys
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.markup import escape

from suiterun import __version__
from suiterun.config import load_config
from suiterun.core import ConfigurationError, configure_logging
from suiterun.crash import install_crash_handler
from suiterun.runner import Runner

logger = structlog.get_logger(__name__)

error_console = Console(stderr=True)

MAX_EXIT_STATUS = 255
ERROR_EXIT_STATUS = 255


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(
        f"[bold red]Error:[/bold red] {escape(message)}", highlight=False, soft_wrap=True
    )


def import_test_modules(modules: tuple[str, ...], paths: tuple[Path, ...]) -> None:
    """Import test modules so their declarations register."""
    for path in reversed(paths):
        sys.path.insert(0, str(path.resolve()))
    for name in modules:
        importlib.import_module(name)
        logger.debug("Test module imported", module=name)


@click.command()
@click.argument("suite", required=False)
@click.option(
    "--import",
    "-i",
    "modules",
    multiple=True,
    help="Module to import before running (repeatable)",
)
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory to prepend to sys.path (repeatable)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (TOML, YAML or JSON)",
)
@click.option("--no-color", is_flag=True, help="Disable coloured output")
@click.option("--color-ok", is_flag=True, help="Colour the [OK] marker")
@click.option("--crash-report", is_flag=True, help="Report fatal signals")
@click.option("--list", "-l", "list_only", is_flag=True, help="List selected tests and exit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__, prog_name="suiterun")
def cli(
    suite: Optional[str],
    modules: tuple[str, ...],
    paths: tuple[Path, ...],
    config_path: Optional[Path],
    no_color: bool,
    color_ok: bool,
    crash_report: bool,
    list_only: bool,
    verbose: bool,
) -> None:
    """
    Run registered tests, optionally only suites starting with SUITE.
    """
    try:
        config = load_config(config_path=config_path)
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(ERROR_EXIT_STATUS)

    overrides: dict = {}
    if no_color:
        overrides["color"] = "never"
    if color_ok:
        overrides["color_ok"] = True
    if crash_report:
        overrides["crash_report"] = True
    if verbose:
        overrides["log_level"] = "DEBUG"
    if overrides:
        config = config.model_copy(update=overrides)

    configure_logging(config.log_level)

    try:
        import_test_modules(modules, paths)
    except Exception as e:
        print_error(f"Failed to load tests: {type(e).__name__}: {e}")
        sys.exit(ERROR_EXIT_STATUS)

    runner = Runner(config=config)

    if list_only:
        runner.reporter.listing(runner.selected(suite))
        return

    if config.crash_report:
        install_crash_handler()

    summary = runner.run(suite)
    sys.exit(min(summary.failed, MAX_EXIT_STATUS))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
