"""Diagnostics commands.

Commands: diagnose
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from shelfscan.cli._app import (
    DIAG_COMMANDS,
    AuthorOpt,
    JsonOpt,
    SeriesOpt,
    TitleOpt,
    WorkersOpt,
    YearOpt,
)
from shelfscan.cli._helpers import import_paths, load_settings
from shelfscan.console import console, err_console, print_diagnostics_table
from shelfscan.models import BookContext
from shelfscan.probe import FFProbe
from shelfscan.scanner import scan_track_numbers


def register_diagnostics_commands(app: typer.Typer) -> None:
    """Register diagnostics commands on the app."""

    @app.command(rich_help_panel=DIAG_COMMANDS)
    def diagnose(
        files: Annotated[list[Path], typer.Argument(help="Audio files of one audiobook.")],
        title: TitleOpt = None,
        author: AuthorOpt = None,
        series: SeriesOpt = None,
        year: YearOpt = None,
        workers: WorkersOpt = None,
        json_output: JsonOpt = False,
    ) -> None:
        """🩺 Compare each track's index with the numbers a rescan infers.

        Orders the files first, then re-probes every committed track and
        shows its metadata number, filename number and raw track tag next to
        the index it was given.

        [bold]Examples:[/]
          shelfscan diagnose *.mp3 --title "Dune"
          shelfscan diagnose *.m4a --json
        """
        settings = load_settings(workers)
        book = BookContext(title=title, author=author, series=series, publish_year=year)
        audiobook, result = import_paths(files, book, settings)

        if not result.success:
            err_console.print("[error]No tracks could be ordered; nothing to diagnose[/]")
            raise typer.Exit(1)

        diagnostics = scan_track_numbers(
            audiobook,
            prober=FFProbe.from_settings(settings),
            settings=settings,
        )

        if json_output:
            console.print_json(json.dumps([d.to_dict() for d in diagnostics], default=str))
        else:
            print_diagnostics_table(diagnostics)
