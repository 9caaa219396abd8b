"""Scanning commands.

Commands: probe, order
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from shelfscan.cli._app import (
    SCAN_COMMANDS,
    AuthorOpt,
    JsonOpt,
    SeriesOpt,
    TitleOpt,
    WorkersOpt,
    YearOpt,
)
from shelfscan.cli._helpers import import_paths, load_settings
from shelfscan.console import console, err_console, print_import_result, print_metadata
from shelfscan.exceptions import ScanError
from shelfscan.models import BookContext
from shelfscan.probe import FFProbe
from shelfscan.scanner import normalize


def register_scan_commands(app: typer.Typer) -> None:
    """Register scanning commands on the app."""

    @app.command(rich_help_panel=SCAN_COMMANDS)
    def probe(
        file: Annotated[Path, typer.Argument(help="Audio file to probe.")],
        verbose: Annotated[
            bool,
            typer.Option("--raw", "-r", help="Include the probe's raw tags."),
        ] = False,
        json_output: JsonOpt = False,
    ) -> None:
        """🔎 Show normalized metadata for one audio file.

        [bold]Examples:[/]
          shelfscan probe "01 - Opening.mp3"
          shelfscan probe book.m4b --raw --json
        """
        settings = load_settings()
        try:
            raw = FFProbe.from_settings(settings).probe(file, verbose)
            metadata = normalize(raw, verbose, path=file)
        except ScanError as e:
            err_console.print(f"[error]✗[/] {e}")
            raise typer.Exit(1) from e

        if json_output:
            console.print_json(json.dumps(metadata.to_dict(), default=str))
        else:
            print_metadata(metadata, file.name)

    @app.command(rich_help_panel=SCAN_COMMANDS)
    def order(
        files: Annotated[list[Path], typer.Argument(help="Audio files of one audiobook.")],
        title: TitleOpt = None,
        author: AuthorOpt = None,
        series: SeriesOpt = None,
        year: YearOpt = None,
        workers: WorkersOpt = None,
        json_output: JsonOpt = False,
    ) -> None:
        """📚 Infer the track order of an audiobook's files.

        Uses the track tag when it holds a number, else the first number in
        the filename (after removing title, author, series, year and disc/CD
        markers). Files without a number, or with a number already taken,
        are listed as invalid.

        [bold]Examples:[/]
          shelfscan order *.mp3
          shelfscan order disc*/*.mp3 --title "Dune" --author "Frank Herbert"
        """
        settings = load_settings(workers)
        book = BookContext(title=title, author=author, series=series, publish_year=year)
        audiobook, result = import_paths(files, book, settings)

        if json_output:
            payload = {
                "tracks": [
                    {"index": t.index, "path": t.path, "ino": t.ino} for t in audiobook.tracks
                ],
                "invalid": [
                    {"path": af.path, "error": af.error}
                    for af in audiobook.audio_files
                    if af.invalid
                ],
                "failed": result.failed,
            }
            console.print_json(json.dumps(payload))
        else:
            print_import_result(result, audiobook.audio_files)

        if not result.success:
            raise typer.Exit(1)
