"""
Index assignment for a batch of scanned files.

Pure functions: they take the resolved track numbers of a whole batch and
return the indices to commit, without touching the audiobook aggregate.
Duplicate detection depends on the complete batch, so callers must have
every file's numbers before calling :func:`assign_indices`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from shelfscan.models import AudioFileRecord, TrackNumbers


@dataclass
class IndexAssignment:
    """Result of assigning indices to one batch.

    Attributes:
        assigned: key -> index, ordered by ascending index
        missing: keys with no usable track number
        duplicates: keys whose index was already claimed earlier in the batch
        shifted: a batch starting below 1 was moved up to start at 1
    """

    assigned: dict[str, int] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    shifted: bool = False


def assign_indices(
    candidates: Sequence[tuple[str, TrackNumbers]],
    *,
    single_file: bool = False,
) -> IndexAssignment:
    """
    Assign a track index to each candidate.

    Args:
        candidates: (key, numbers) pairs in batch order; the first file to
            claim an index keeps it
        single_file: The batch consisted of exactly one file, which always
            gets index 1

    Returns:
        IndexAssignment with batches starting below 1 already shifted to start at 1

    Example:
        >>> result = assign_indices([("a", TrackNumbers(2)), ("b", TrackNumbers(1))])
        >>> result.assigned
        {'b': 1, 'a': 2}
    """
    result = IndexAssignment()
    claimed: dict[int, str] = {}

    for key, numbers in candidates:
        index = 1 if single_file else numbers.preferred
        if index is None:
            result.missing.append(key)
            continue
        if index in claimed:
            result.duplicates.append(key)
            continue
        claimed[index] = key

    lowest = min(claimed, default=1)
    if lowest < 1:
        claimed = {index + 1 - lowest: key for index, key in claimed.items()}
        result.shifted = True

    result.assigned = {key: index for index, key in sorted(claimed.items())}
    return result


def audio_file_sort_key(audio_file: AudioFileRecord) -> int:
    """Display order for an audiobook's files: preferred track number, else 0."""
    preferred = audio_file.track_numbers.preferred
    return preferred if preferred is not None else 0
