"""Pydantic schemas for validating external data sources."""

from __future__ import annotations

from shelfscan.schemas.probe import (
    FILE_TAG_PREFIX,
    RawAudioStream,
    RawChapter,
    RawProbeResult,
    RawVideoStream,
    validate_probe_result,
)

__all__ = [
    "FILE_TAG_PREFIX",
    "RawAudioStream",
    "RawChapter",
    "RawProbeResult",
    "RawVideoStream",
    "validate_probe_result",
]
