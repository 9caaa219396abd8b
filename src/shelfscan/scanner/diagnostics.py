"""Track number diagnostics: compare committed indices with what a scan infers."""

from __future__ import annotations

import logging

from shelfscan.models import Audiobook, TrackDiagnostic
from shelfscan.probe import FFProbe, Prober
from shelfscan.scanner.batch import scan_files
from shelfscan.scanner.track_numbers import resolve_track_numbers
from shelfscan.settings import ScannerSettings, get_settings

logger = logging.getLogger(__name__)


def scan_track_numbers(
    audiobook: Audiobook,
    *,
    prober: Prober | None = None,
    settings: ScannerSettings | None = None,
) -> list[TrackDiagnostic]:
    """
    Re-probe every track (verbose) and report current vs. inferred numbers.

    Read-only: neither tracks nor audio files are modified. A track whose
    probe fails still gets a row, with its filename number and the error.
    """
    settings = settings or get_settings()
    prober = prober or FFProbe.from_settings(settings)

    tracks = audiobook.tracks
    batch = scan_files(
        tracks,
        audiobook.book,
        prober,
        max_workers=settings.max_workers,
        verbose=True,
    )

    diagnostics: list[TrackDiagnostic] = []
    for scan in batch.scans:
        track = tracks[scan.position]
        # Same resolver as imports, so a CD-only filename reports its CD number
        numbers = scan.numbers or resolve_track_numbers(None, audiobook.book, track.filename)
        metadata = scan.metadata

        logger.info(
            f'Track # for "{track.filename}", Metadata: "{numbers.from_meta}", '
            f'Filename: "{numbers.from_filename}", Current: "{track.index}"'
        )
        diagnostics.append(
            TrackDiagnostic(
                filename=track.filename,
                current_track_num=track.index,
                track_num_from_filename=numbers.from_filename,
                track_num_from_meta=numbers.from_meta,
                scan_data_track_num=metadata.tags.track if metadata else None,
                raw_tags=metadata.raw_tags if metadata else None,
                error=str(scan.error) if scan.error else None,
            )
        )

    return diagnostics
