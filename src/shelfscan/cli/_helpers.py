"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import typer

from shelfscan.console import err_console
from shelfscan.exceptions import ConfigurationError
from shelfscan.models import Audiobook, BookContext, ImportResult, NewAudioFile
from shelfscan.probe import FFProbe
from shelfscan.scanner import import_audio_files
from shelfscan.settings import ScannerSettings, get_settings


def load_settings(workers: int | None = None) -> ScannerSettings:
    """Environment settings with CLI overrides applied; exits on bad config."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        err_console.print(f"[error]Configuration error:[/] {e}")
        raise typer.Exit(2) from e
    if workers is not None:
        settings = settings.model_copy(update={"max_workers": workers})
    return settings


def build_new_files(paths: Sequence[Path]) -> list[NewAudioFile]:
    """Describe files on disk, with paths relative to their common directory."""
    resolved = [p.resolve() for p in paths]
    missing = [p for p in resolved if not p.is_file()]
    if missing:
        for p in missing:
            err_console.print(f"[error]Not a file:[/] {p}")
        raise typer.Exit(1)

    root = Path(os.path.commonpath([p.parent for p in resolved]))
    return [NewAudioFile.from_path(p, root) for p in resolved]


def import_paths(
    paths: Sequence[Path],
    book: BookContext,
    settings: ScannerSettings,
) -> tuple[Audiobook, ImportResult]:
    """Run a batch import of ``paths`` into a fresh in-memory audiobook."""
    new_files = build_new_files(paths)
    audiobook = Audiobook(id=book.title or new_files[0].full_path.parent.name, book=book)
    result = import_audio_files(
        audiobook,
        new_files,
        prober=FFProbe.from_settings(settings),
        settings=settings,
    )
    return audiobook, result
