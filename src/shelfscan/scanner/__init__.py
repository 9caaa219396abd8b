"""
Audio file scanning and track ordering.

Provides probe normalization, track number resolution, batch import,
rescan reconciliation and track number diagnostics for audiobooks.
"""

from __future__ import annotations

from .diagnostics import scan_track_numbers
from .importer import import_audio_files
from .normalizer import IMAGE_CODECS, normalize, parse_track_tag, select_audio_stream
from .ordering import IndexAssignment, assign_indices, audio_file_sort_key
from .rescan import rescan_audio_files, sync_track
from .track_numbers import (
    cd_number_from_filename,
    clean_filename,
    resolve_track_numbers,
    track_number_from_filename,
    track_number_from_meta,
)

__all__ = [
    "IMAGE_CODECS",
    "IndexAssignment",
    "assign_indices",
    "audio_file_sort_key",
    "cd_number_from_filename",
    "clean_filename",
    "import_audio_files",
    "normalize",
    "parse_track_tag",
    "rescan_audio_files",
    "resolve_track_numbers",
    "scan_track_numbers",
    "select_audio_stream",
    "sync_track",
    "track_number_from_filename",
    "track_number_from_meta",
]
