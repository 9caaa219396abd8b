"""
Per-file scanning for a batch of audio files.

Each file is probed, normalized and given its track numbers independently;
a failure only affects that file. Files are scanned one after another unless
``max_workers`` > 1, in which case a bounded thread pool is used and results
are put back into input order once every file is done.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from shelfscan.exceptions import ProbeFailureError, ScanError
from shelfscan.models import AudioMetadata, BookContext, TrackNumbers
from shelfscan.probe import Prober
from shelfscan.scanner.normalizer import normalize
from shelfscan.scanner.track_numbers import resolve_track_numbers

logger = logging.getLogger(__name__)


class ScanTarget(Protocol):
    """Anything with a ``full_path`` and ``filename`` (new files, records, tracks)."""

    full_path: Path
    filename: str


@dataclass
class FileScan:
    """Scan outcome for one file."""

    position: int
    metadata: AudioMetadata | None = None
    numbers: TrackNumbers | None = None
    error: ScanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.metadata is not None


@dataclass
class BatchScan:
    """Scan outcomes in input order; files skipped after cancellation are absent."""

    scans: list[FileScan] = field(default_factory=list)
    cancelled: bool = False


def scan_file(
    full_path: Path,
    filename: str,
    book: BookContext,
    prober: Prober,
    *,
    verbose: bool = False,
    position: int = 0,
) -> FileScan:
    """Probe, normalize and resolve one file; never raises."""
    logger.debug(f'Scanning path "{full_path}"')
    try:
        raw = prober.probe(Path(full_path), verbose)
        metadata = normalize(raw, verbose, path=full_path)
    except ScanError as e:
        return FileScan(position, error=e)
    except Exception as e:
        return FileScan(position, error=ProbeFailureError(f"Probe failed: {e}", path=full_path))

    numbers = resolve_track_numbers(metadata, book, filename)
    return FileScan(position, metadata=metadata, numbers=numbers)


def scan_files(
    files: Sequence[ScanTarget],
    book: BookContext,
    prober: Prober,
    *,
    max_workers: int = 1,
    verbose: bool = False,
    cancel: threading.Event | None = None,
) -> BatchScan:
    """
    Scan every file, honoring ``cancel`` between files.

    Args:
        files: Objects with ``full_path`` and ``filename``
        book: Book context for filename cleaning
        prober: Probing collaborator
        max_workers: 1 scans sequentially; more uses a thread pool
        verbose: Ask the prober for raw tags
        cancel: Set to stop starting new files

    Returns:
        BatchScan in input order
    """

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    def run(position: int) -> FileScan | None:
        if cancelled():
            return None
        item = files[position]
        return scan_file(
            item.full_path, item.filename, book, prober, verbose=verbose, position=position
        )

    batch = BatchScan()

    if max_workers <= 1 or len(files) <= 1:
        for position in range(len(files)):
            scan = run(position)
            if scan is None:
                break
            batch.scans.append(scan)
    else:
        results: dict[int, FileScan] = {}
        with ThreadPoolExecutor(max_workers=min(max_workers, len(files))) as executor:
            futures = {executor.submit(run, i): i for i in range(len(files))}
            for future in as_completed(futures):
                scan = future.result()
                if scan is not None:
                    results[futures[future]] = scan
        batch.scans = [results[i] for i in sorted(results)]

    batch.cancelled = len(batch.scans) < len(files) and cancelled()
    if batch.cancelled:
        logger.warning(f"Scan cancelled after {len(batch.scans)} of {len(files)} files")
    return batch
