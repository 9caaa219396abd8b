"""App configuration, callbacks, and shared option types for the CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from shelfscan.console import console, err_console
from shelfscan.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

SCAN_COMMANDS = "Scanning"
DIAG_COMMANDS = "Diagnostics"


# =============================================================================
# Shared Option Types
# =============================================================================

TitleOpt = Annotated[
    str | None,
    typer.Option("--title", "-t", help="Book title (stripped from filenames)."),
]
AuthorOpt = Annotated[
    str | None,
    typer.Option("--author", "-a", help="Book author (stripped from filenames)."),
]
SeriesOpt = Annotated[
    str | None,
    typer.Option("--series", "-s", help="Series name (stripped from filenames)."),
]
YearOpt = Annotated[
    str | None,
    typer.Option("--year", "-y", help="Publish year (stripped from filenames)."),
]
WorkersOpt = Annotated[
    int | None,
    typer.Option(
        "--workers",
        "-w",
        min=1,
        help="Files probed concurrently (default: SHELFSCAN_MAX_WORKERS, 1 = sequential).",
    ),
]
JsonOpt = Annotated[
    bool,
    typer.Option("--json", "-j", help="Print JSON instead of tables."),
]


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from shelfscan import __version__

        console.print(f"[bold]shelfscan[/] {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================

MAIN_EPILOG = """
[bold cyan]Examples:[/]
  shelfscan probe "01 - Opening.mp3"            [dim]# Normalized metadata[/]
  shelfscan order *.mp3 --title "Dune"          [dim]# Inferred track order[/]
  shelfscan diagnose *.mp3 --title "Dune"       [dim]# Current vs. inferred[/]

[dim]ffprobe must be on PATH (or set SHELFSCAN_FFPROBE_BIN).[/]
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="shelfscan",
        help="Audiobook track ordering from embedded tags and filenames",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


# =============================================================================
# Logging Setup
# =============================================================================


def setup_logging(verbose: bool, log_file: Path | None) -> None:
    """Configure logging from CLI flags, falling back to SHELFSCAN_LOG_LEVEL."""
    from shelfscan.logging_setup import setup_logging as _setup_logging
    from shelfscan.settings import get_settings

    log_level = "DEBUG"
    if not verbose:
        try:
            log_level = get_settings().log_level
        except ConfigurationError as e:
            err_console.print(f"[error]Configuration error:[/] {e}")
            raise typer.Exit(2) from e

    _setup_logging(
        log_level=log_level,
        log_file=log_file,
        rich_console=True,
        quiet_console=not verbose,
    )


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback(invoke_without_command=True)
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) logging."),
        ] = False,
        log_file: Annotated[
            Path | None,
            typer.Option("--log-file", help="Also write DEBUG logs to this file."),
        ] = None,
    ) -> None:
        """Infer and audit the track order of multi-file audiobooks.

        [cyan]probe → normalize → resolve → order[/]
        """
        ctx.ensure_object(dict)
        ctx.obj["verbose"] = verbose
        ctx.obj["log_file"] = log_file

        setup_logging(verbose, log_file)
