"""Rich console output for the shelfscan CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from shelfscan.exceptions import TrackOrderError

if TYPE_CHECKING:
    from shelfscan.models import AudioFileRecord, AudioMetadata, ImportResult, TrackDiagnostic

SHELFSCAN_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "dim": "dim",
        "path": "cyan",
        "index": "bold magenta",
        "duration": "green",
        "bitrate": "yellow",
    }
)

console = Console(theme=SHELFSCAN_THEME, stderr=False)
err_console = Console(theme=SHELFSCAN_THEME, stderr=True)


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS (or M:SS under an hour)."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_bitrate(bit_rate: int | None) -> str:
    if not bit_rate:
        return "-"
    return f"{bit_rate // 1000} kbps"


def _num(value: object) -> str:
    return "-" if value is None else str(value)


def print_metadata(metadata: AudioMetadata, filename: str) -> None:
    """Print normalized metadata for one file."""
    table = Table(title=escape(filename), show_header=False, title_style="path")
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Format", _num(metadata.format))
    table.add_row("Duration", f"[duration]{format_duration(metadata.duration)}[/]")
    table.add_row("Size", f"{metadata.size:,} bytes")
    table.add_row("Bitrate", f"[bitrate]{format_bitrate(metadata.bit_rate)}[/]")
    table.add_row("Codec", _num(metadata.codec))
    table.add_row("Channels", f"{_num(metadata.channels)} ({_num(metadata.channel_layout)})")
    table.add_row("Sample rate", _num(metadata.sample_rate))
    table.add_row("Chapters", str(len(metadata.chapters)))
    table.add_row("Cover art", metadata.embedded_cover_art or "-")
    table.add_row("Track", f"{_num(metadata.track_number)} / {_num(metadata.track_total)}")
    for name, value in metadata.tags.items():
        table.add_row(f"tag:{name}", escape(str(value)))

    console.print(table)


def print_import_result(result: ImportResult, audio_files: list[AudioFileRecord]) -> None:
    """Print committed tracks followed by the files that were left out."""
    if result.tracks:
        table = Table(title="Tracks", show_header=True, header_style="bold")
        table.add_column("#", style="index", justify="right")
        table.add_column("File", style="path")
        table.add_column("Meta", justify="right")
        table.add_column("Filename", justify="right")
        table.add_column("CD", justify="right")
        table.add_column("Duration", style="duration", justify="right")

        by_ino = {af.ino: af for af in audio_files}
        for track in result.tracks:
            af = by_ino.get(track.ino)
            table.add_row(
                str(track.index),
                escape(track.filename),
                _num(af.track_num_from_meta if af else None),
                _num(af.track_num_from_filename if af else None),
                _num(af.cd_num_from_filename if af else None),
                format_duration(track.duration),
            )
        console.print(table)

    rejected = [af for af in audio_files if af.invalid]
    if rejected:
        table = Table(title="Invalid files", show_header=True, header_style="bold")
        table.add_column("File", style="path")
        table.add_column("Reason", style="warning")
        for af in rejected:
            table.add_row(escape(af.filename), af.error or "-")
        console.print(table)

    for error in result.errors:
        if isinstance(error, TrackOrderError):
            continue  # already listed above
        err_console.print(f"[error]✗[/] {escape(str(error))}")

    summary = (
        f"[success]{result.committed} committed[/], "
        f"[warning]{result.duplicates} duplicate[/], "
        f"[warning]{result.invalid} invalid[/], "
        f"[error]{result.failed} failed[/]"
    )
    console.print(summary)


def print_diagnostics_table(diagnostics: list[TrackDiagnostic]) -> None:
    """Print current vs. inferred track numbers."""
    if not diagnostics:
        console.print("[dim]No tracks to diagnose[/]")
        return

    table = Table(title="Track numbers", show_header=True, header_style="bold")
    table.add_column("File", style="path")
    table.add_column("Current", style="index", justify="right")
    table.add_column("Meta", justify="right")
    table.add_column("Filename", justify="right")
    table.add_column("Tag", justify="right")
    table.add_column("", justify="center")

    for diag in diagnostics:
        if diag.error:
            mark = "[error]✗[/]"
        elif diag.agrees:
            mark = "[success]✓[/]"
        else:
            mark = "[warning]≠[/]"
        table.add_row(
            escape(diag.filename),
            str(diag.current_track_num),
            _num(diag.track_num_from_meta),
            _num(diag.track_num_from_filename),
            escape(_num(diag.scan_data_track_num)),
            mark,
        )

    console.print(table)
