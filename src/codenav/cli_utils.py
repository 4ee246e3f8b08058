"""Shared CLI utilities for codenav.

Exit codes, the console singleton, and message/logging helpers used by
the command modules.
"""

import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

# Exit codes following Unix conventions
EXIT_ERROR: int = 1  # General error (file not found, no symbol at cursor)
EXIT_CONFIG_ERROR: int = 2  # Configuration/usage error

# When stdout is piped, Rich strips ANSI codes
_is_tty = sys.stdout.isatty()

console = Console(force_terminal=_is_tty, no_color=not _is_tty)

logger = logging.getLogger(__name__)


def _error(message: str) -> None:
    """Display error message with red styling.

    Args:
        message: Error message to display.

    """
    console.print(f"[red]Error:[/red] {message}")


def _info(message: str) -> None:
    """Display info message with blue styling."""
    console.print(f"[blue]Info:[/blue] {message}")


def _warning(message: str) -> None:
    """Display warning message with yellow styling."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags.

    Args:
        verbose: If True, set DEBUG level.
        quiet: If True, set ERROR level.

    Note:
        verbose takes precedence over quiet. Default level is WARNING.
        CODENAV_LOG_LEVEL env var (DEBUG, INFO, WARNING) overrides both.

    """
    env_level = os.environ.get("CODENAV_LOG_LEVEL", "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING"):
        level = getattr(logging, env_level)
    elif verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    # Clear any existing handlers to avoid duplicates
    logging.root.handlers.clear()

    # basicConfig doesn't set the handler level
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )


def _validate_project_path(project: str) -> Path:
    """Validate and resolve project path.

    Args:
        project: Path to project directory.

    Returns:
        Resolved absolute Path.

    Raises:
        typer.Exit: If path doesn't exist or isn't a directory.

    """
    project_path = Path(project).resolve()

    if not project_path.exists():
        _error(f"Project directory not found: {project}")
        raise typer.Exit(code=EXIT_ERROR)

    if not project_path.is_dir():
        _error(f"Project path must be a directory, got file: {project}")
        raise typer.Exit(code=EXIT_ERROR)

    return project_path


def _validate_file_path(file: str) -> Path:
    """Validate and resolve a source file path.

    Raises:
        typer.Exit: If path doesn't exist or isn't a file.

    """
    file_path = Path(file).resolve()

    if not file_path.is_file():
        _error(f"Source file not found: {file}")
        raise typer.Exit(code=EXIT_ERROR)

    return file_path
