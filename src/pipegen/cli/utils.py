"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from pipegen.errors import ErrorList, PipegenError

console = Console()
err_console = Console(stderr=True)

DEBUG_ENV = "PIPEGEN_DEBUG"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the pipegen CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (PIPEGEN_DEBUG=1): DEBUG level - visibility decisions, bindings
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("pipegen")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def describe_error(error: Exception) -> list[str]:
    """One line per leaf error, prefixed with its kind."""
    if isinstance(error, ErrorList):
        return [str(e) for e in error.flatten()]
    return [str(error)]


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Report a pipegen error and exit."""
    if isinstance(error, PipegenError):
        exit_with_error("\n  ".join(describe_error(error)))
    typer.secho(f"Unexpected error: {error}", err=True, fg=typer.colors.RED)
    sys.exit(1)
