"""
Track and disc number resolution.

Two unreliable sources give ordering hints for an audiobook file: the track
tag inside the file and numbers in its filename. Filenames routinely carry the
book title, author, series and year (which may contain digits) plus disc/CD
markers, so those are stripped before the first number is taken.

Precedence and promotion:
    - A numeric metadata track number beats the filename number
      (``TrackNumbers.preferred``).
    - If the filename has no track number but has a disc/CD number, the
      disc/CD number is used as the filename track number.

Zero is a valid number throughout; only ``None`` means "absent".
"""

from __future__ import annotations

import re
from pathlib import PurePath

from shelfscan.models import AudioMetadata, BookContext, TrackNumbers

# Patterns are ASCII-only: "\d" must not match e.g. Arabic-Indic digits
DISC_MARKER_PATTERN = re.compile(r"\bdisc \d\d?\b", re.IGNORECASE | re.ASCII)
CD_MARKER_PATTERN = re.compile(r"\bcd ?\d\d?\b", re.IGNORECASE | re.ASCII)
CD_NUMBER_PATTERN = re.compile(r"\b(disc|cd) ?(\d\d?)\b", re.IGNORECASE | re.ASCII)
DIGIT_RUN_PATTERN = re.compile(r"\d{1,4}", re.ASCII)


def track_number_from_meta(metadata: AudioMetadata | None) -> int | None:
    """Integer-truncated track tag number, or None unless it is a non-negative number."""
    if metadata is None:
        return None
    value = metadata.track_number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = int(value)
    return number if number >= 0 else None


def strip_book_context(stem: str, book: BookContext) -> str:
    """Remove the first occurrence of title, author, series and year (in that order)."""
    for value in (book.title, book.author, book.series, book.publish_year):
        if value:
            stem = stem.replace(str(value), "", 1)
    return stem


def clean_filename(filename: str, book: BookContext) -> str:
    """Filename stem with book context and one disc and one CD marker removed."""
    stem = strip_book_context(PurePath(filename).stem, book)
    stem = DISC_MARKER_PATTERN.sub("", stem, count=1)
    return CD_MARKER_PATTERN.sub("", stem, count=1)


def track_number_from_filename(filename: str, book: BookContext) -> int | None:
    """First run of 1-4 digits in the cleaned filename."""
    match = DIGIT_RUN_PATTERN.search(clean_filename(filename, book))
    return int(match.group()) if match else None


def cd_number_from_filename(filename: str, book: BookContext) -> int | None:
    """Disc/CD number, matched before disc and CD markers are stripped."""
    stem = strip_book_context(PurePath(filename).stem, book)
    match = CD_NUMBER_PATTERN.search(stem)
    if not match:
        return None
    try:
        return int(match.group(2))
    except ValueError:
        return None


def resolve_track_numbers(
    metadata: AudioMetadata | None,
    book: BookContext,
    filename: str,
) -> TrackNumbers:
    """
    Derive all ordering hints for one file.

    Args:
        metadata: Canonical metadata (None when only the filename is known)
        book: Book context used to clean the filename
        filename: Filename including extension

    Returns:
        TrackNumbers with the CD -> track promotion already applied

    Example:
        >>> book = BookContext(title="Book Title")
        >>> resolve_track_numbers(None, book, "Book Title - disc 2 - 03.mp3")
        TrackNumbers(from_meta=None, from_filename=3, cd_from_filename=2)
        >>> resolve_track_numbers(None, book, "Book Title CD2.mp3")
        TrackNumbers(from_meta=None, from_filename=2, cd_from_filename=None)
    """
    from_filename = track_number_from_filename(filename, book)
    cd_number = cd_number_from_filename(filename, book)

    if from_filename is None and cd_number is not None:
        from_filename, cd_number = cd_number, None

    return TrackNumbers(
        from_meta=track_number_from_meta(metadata),
        from_filename=from_filename,
        cd_from_filename=cd_number,
    )
