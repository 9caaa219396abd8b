"""Shared pytest fixtures and helpers for shelfscan tests."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any
from unittest import mock

import pytest

from shelfscan.models import NewAudioFile
from shelfscan.schemas.probe import RawProbeResult
from shelfscan.settings import ScannerSettings, clear_settings_cache


def make_raw(
    track: Any = None,
    *,
    duration: float | None = 120.0,
    size: int | None = 1_000_000,
    tags: dict[str, Any] | None = None,
    streams: list[dict[str, Any]] | None = None,
    video_codec: str | None = None,
    **fields: Any,
) -> RawProbeResult:
    """Create a RawProbeResult for one audio file.

    Args:
        track: Value of the ``track`` tag (omitted when None).
        duration: Container duration in seconds.
        size: File size in bytes.
        tags: Extra tags.
        streams: Audio streams (defaults to one mp3 stream).
        video_codec: Codec of an embedded video stream, if any.
        **fields: Any other RawProbeResult field.

    Returns:
        RawProbeResult with the specified values.
    """
    all_tags = dict(tags or {})
    if track is not None:
        all_tags["track"] = track
    data: dict[str, Any] = {
        "format": "mp3",
        "duration": duration,
        "size": size,
        "bit_rate": 64000,
        "audio_streams": streams if streams is not None else [{"codec": "mp3"}],
        "video_stream": {"codec": video_codec} if video_codec else None,
        "tags": all_tags,
        **fields,
    }
    return RawProbeResult.model_validate(data)


def make_new_file(filename: str, ino: str | None = None, folder: str = "/books/dune") -> NewAudioFile:
    """Create a NewAudioFile without touching the filesystem."""
    return NewAudioFile(
        ino=ino or filename,
        path=filename,
        full_path=Path(folder) / filename,
        filename=filename,
        ext=Path(filename).suffix,
    )


class FakeProber:
    """Prober returning canned results keyed by filename.

    A value that is an exception instance is raised instead of returned.
    ``verbose`` probes copy the tags into ``raw_tags``.
    """

    def __init__(self, results: dict[str, RawProbeResult | Exception] | None = None) -> None:
        self.results: dict[str, RawProbeResult | Exception] = dict(results or {})
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def probe(self, path: Path, verbose: bool = False) -> RawProbeResult:
        with self._lock:
            self.calls.append(path.name)
        result = self.results[path.name]
        if isinstance(result, Exception):
            raise result
        if verbose:
            return result.model_copy(update={"raw_tags": dict(result.tags)})
        return result


@pytest.fixture(autouse=True)
def _clean_settings_cache() -> Any:
    """Never let cached settings leak between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> ScannerSettings:
    """Sequential settings that do not depend on the environment."""
    with mock.patch.dict(os.environ, {}, clear=True):
        return ScannerSettings(max_workers=1, probe_retries=0)
