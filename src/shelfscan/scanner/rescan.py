"""
Rescan of an audiobook's known audio files.

Re-probes every audio file the aggregate already holds, applies the new
metadata and keeps the committed tracks in sync. Tracks are matched by inode
first; a track that only matches by path means the file was replaced, so the
track is moved to the file's current inode.
"""

from __future__ import annotations

import logging
import threading

from shelfscan.exceptions import IdentityMismatchError, OrphanFileError
from shelfscan.models import AudioFileRecord, Audiobook
from shelfscan.probe import FFProbe, Prober
from shelfscan.scanner.batch import scan_files
from shelfscan.settings import ScannerSettings, get_settings

logger = logging.getLogger(__name__)


def sync_track(audiobook: Audiobook, audio_file: AudioFileRecord) -> None:
    """Push an updated audio file onto its committed track, if it has one."""
    track = audiobook.find_track_by_ino(audio_file.ino)
    if track is not None:
        track.sync_metadata(audio_file)
        return

    if audio_file.exclude:
        return

    track = audiobook.find_track_by_path(audio_file.path)
    if track is not None:
        mismatch = IdentityMismatchError(
            f"Audio file inode mismatch with track {audio_file.filename!r}",
            ino=audio_file.ino,
            path=audio_file.path,
            previous_ino=track.ino,
        )
        logger.error(f"{mismatch} (was {track.ino}, now {audio_file.ino})")
        audiobook.rekey_track(track, audio_file.ino)
        track.sync_metadata(audio_file)
        return

    orphan = OrphanFileError(
        f"Audio file {audio_file.filename!r} has no matching track for {audiobook.title!r}",
        ino=audio_file.ino,
        path=audio_file.path,
    )
    logger.error(str(orphan))


def rescan_audio_files(
    audiobook: Audiobook,
    *,
    prober: Prober | None = None,
    settings: ScannerSettings | None = None,
    cancel: threading.Event | None = None,
) -> int:
    """
    Re-probe an audiobook's audio files and sync changed ones.

    Args:
        audiobook: Aggregate whose audio files and tracks are updated in place
        prober: Probing collaborator (defaults to ffprobe)
        settings: Scanner settings (defaults to environment settings)
        cancel: Set to stop between files; updates already found are kept

    Returns:
        Number of audio files whose metadata changed
    """
    settings = settings or get_settings()
    prober = prober or FFProbe.from_settings(settings)

    audio_files = audiobook.audio_files
    batch = scan_files(
        audio_files,
        audiobook.book,
        prober,
        max_workers=settings.max_workers,
        cancel=cancel,
    )

    updates = 0
    for scan in batch.scans:
        audio_file = audio_files[scan.position]
        if not scan.ok or scan.metadata is None or scan.numbers is None:
            logger.error(f"Scan failed for {audio_file.path}: {scan.error}")
            continue

        if audio_file.update_metadata(scan.metadata, scan.numbers):
            sync_track(audiobook, audio_file)
            updates += 1

    logger.debug(f"Rescan of {audiobook.title!r} found {updates} updated audio files")
    return updates
