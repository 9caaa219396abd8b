"""
Batch import of newly discovered audio files.

Scans every new file of one audiobook, registers the scanned records with the
aggregate and commits a duplicate-free, 1-based, ordered track list.

Per-file problems (probe failure, no track number, duplicate track number)
are soft failures: the file is logged, counted and left out of the track list
while the rest of the batch carries on. The import as a whole is abandoned
only when nothing in the batch can be ordered.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from shelfscan.exceptions import (
    DuplicateTrackNumberError,
    NoTrackNumberError,
    TrackOrderError,
)
from shelfscan.models import (
    AudioFileRecord,
    Audiobook,
    ImportResult,
    NewAudioFile,
    TrackNumbers,
    TrackRecord,
)
from shelfscan.probe import FFProbe, Prober
from shelfscan.scanner.batch import scan_files
from shelfscan.scanner.ordering import assign_indices, audio_file_sort_key
from shelfscan.settings import ScannerSettings, get_settings

logger = logging.getLogger(__name__)


def _reject(record: AudioFileRecord, error: TrackOrderError, result: ImportResult) -> None:
    logger.debug(f"{error.message.capitalize()} for {record.filename!r}")
    record.mark_invalid(error)
    result.errors.append(error)


def import_audio_files(
    audiobook: Audiobook,
    new_files: Sequence[NewAudioFile],
    *,
    prober: Prober | None = None,
    settings: ScannerSettings | None = None,
    cancel: threading.Event | None = None,
) -> ImportResult:
    """
    Scan new files into an audiobook's ordered track list.

    Args:
        audiobook: Aggregate to register files and tracks with
        new_files: Files discovered for this audiobook, in discovery order
        prober: Probing collaborator (defaults to ffprobe)
        settings: Scanner settings (defaults to environment settings)
        cancel: Set to stop between files; a cancelled import commits nothing

    Returns:
        ImportResult with committed tracks and soft-failure counts

    Example:
        >>> book = Audiobook("ab_1", BookContext(title="Dune"))
        >>> result = import_audio_files(book, files, prober=FFProbe())
        >>> [t.index for t in book.tracks]
        [1, 2, 3]
    """
    result = ImportResult()

    if not new_files:
        logger.error(f"No new audio files to scan for {audiobook.title!r}")
        result.aborted = True
        return result

    settings = settings or get_settings()
    prober = prober or FFProbe.from_settings(settings)

    logger.debug(f"Scanning {len(new_files)} audio files for {audiobook.title!r}")
    batch = scan_files(
        new_files,
        audiobook.book,
        prober,
        max_workers=settings.max_workers,
        cancel=cancel,
    )
    if batch.cancelled:
        result.cancelled = True
        return result

    records: dict[str, AudioFileRecord] = {}
    candidates: list[tuple[str, TrackNumbers]] = []

    for scan in batch.scans:
        new_file = new_files[scan.position]
        if not scan.ok or scan.metadata is None or scan.numbers is None:
            logger.error(f"Scan failed for {new_file.path}: {scan.error}")
            result.failed += 1
            if scan.error is not None:
                result.errors.append(scan.error)
            continue

        record = AudioFileRecord.from_scan(new_file, scan.metadata, scan.numbers)
        if audiobook.add_audio_file(record) is not record:
            # Already known; its place in the track list was settled before
            continue
        records[record.ino] = record
        candidates.append((record.ino, scan.numbers))

    # Duplicate detection needs every file's numbers, so it runs after the scan
    assignment = assign_indices(candidates, single_file=len(new_files) == 1)

    for ino in assignment.missing:
        record = records[ino]
        _reject(record, NoTrackNumberError(path=record.path), result)
        result.invalid += 1

    for ino in assignment.duplicates:
        record = records[ino]
        index = record.track_numbers.preferred
        _reject(record, DuplicateTrackNumberError(path=record.path, index=index), result)
        result.duplicates += 1

    if not assignment.assigned:
        logger.warning(f"No tracks for audiobook {audiobook.title!r}")
        result.aborted = True
        return result

    audiobook.sort_audio_files(audio_file_sort_key)

    if assignment.shifted:
        logger.debug(f"Track numbers for {audiobook.title!r} start below 1, shifting up")

    for ino, index in assignment.assigned.items():
        record = records[ino]
        track = TrackRecord.from_audio_file(record, index)
        try:
            audiobook.add_track(track)
        except DuplicateTrackNumberError as e:
            # Index held by a track from an earlier import
            _reject(record, e, result)
            result.duplicates += 1
            continue
        record.index = index
        result.tracks.append(track)

    if result.duplicates:
        logger.warning(f'{result.duplicates} duplicate tracks for "{audiobook.title}"')
    if result.invalid:
        logger.error(f'{result.invalid} invalid tracks for "{audiobook.title}"')
    if result.failed:
        logger.error(f'{result.failed} audio files failed to scan for "{audiobook.title}"')

    logger.info(f"Committed {result.committed} tracks for {audiobook.title!r}")
    return result
