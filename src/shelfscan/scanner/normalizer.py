"""
Probe result normalization.

Turns a :class:`RawProbeResult` into canonical :class:`AudioMetadata`:
picks the audio stream that represents the file, detects embedded cover art,
copies the file's tags and parses the track tag into number and total.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from shelfscan.exceptions import InvalidAudioFileError, InvalidDurationOrSizeError
from shelfscan.models import AudioMetadata, Chapter, FileTags, TagNumber
from shelfscan.schemas.probe import RawAudioStream, RawProbeResult

# Video codecs that mean "this is a cover image", not real video
IMAGE_CODECS = frozenset({"mjpeg", "jpeg", "png"})

# Plain ASCII decimal; anything else in a tag stays text
NUMERIC_TAG_PATTERN = re.compile(r"[+-]?\d+(\.\d+)?", re.ASCII)


def select_audio_stream(streams: list[RawAudioStream]) -> RawAudioStream:
    """Pick the stream that represents the file.

    The only stream if there is one, else the default stream, else the first.
    """
    if len(streams) == 1:
        return streams[0]
    return next((s for s in streams if s.is_default), streams[0])


def _parse_tag_part(part: str) -> TagNumber:
    text = part.strip()
    match = NUMERIC_TAG_PATTERN.fullmatch(text)
    if match is None:
        return text
    return float(text) if match.group(1) else int(text)


def parse_track_tag(value: Any) -> tuple[TagNumber | None, TagNumber | None]:
    """
    Split a track tag of the form ``N`` or ``N/M``.

    Numeric parts come back as numbers; anything else is kept as the stripped
    text so later numeric checks simply fail on it.

    Examples:
        >>> parse_track_tag("5/12")
        (5, 12)
        >>> parse_track_tag("7")
        (7, None)
        >>> parse_track_tag("A/2")
        ('A', 2)
    """
    parts = str(value).split("/")
    number = _parse_tag_part(parts[0])
    total = _parse_tag_part(parts[1]) if len(parts) > 1 else None
    return number, total


def normalize(
    raw: RawProbeResult | None,
    verbose: bool = False,
    *,
    path: Path | str | None = None,
) -> AudioMetadata:
    """
    Build canonical metadata from a probe result.

    Args:
        raw: Probe result, or None if the probe produced nothing
        verbose: Keep the probe's raw tags for diagnostics
        path: File path, only used for error context

    Returns:
        AudioMetadata

    Raises:
        InvalidAudioFileError: No probe result or no audio stream
        InvalidDurationOrSizeError: Duration or size missing (or zero)
    """
    if raw is None or not raw.audio_streams:
        raise InvalidAudioFileError(path=path)
    if not raw.duration or not raw.size:
        raise InvalidDurationOrSizeError(path=path)

    stream = select_audio_stream(raw.audio_streams)

    embedded_cover_art: str | None = None
    if raw.video_stream is not None and raw.video_stream.codec in IMAGE_CODECS:
        embedded_cover_art = raw.video_stream.codec

    tags = FileTags.from_mapping(raw.tags)

    track_number: TagNumber | None = None
    track_total: TagNumber | None = None
    if tags.track:
        track_number, track_total = parse_track_tag(tags.track)

    return AudioMetadata(
        format=raw.format,
        duration=raw.duration,
        size=raw.size,
        bit_rate=stream.bit_rate or raw.bit_rate,
        codec=stream.codec,
        time_base=stream.time_base,
        language=stream.language,
        channel_layout=stream.channel_layout,
        channels=stream.channels,
        sample_rate=stream.sample_rate,
        chapters=tuple(Chapter(c.id, c.start, c.end, c.title) for c in raw.chapters),
        embedded_cover_art=embedded_cover_art,
        tags=tags,
        track_number=track_number,
        track_total=track_total,
        raw_tags=raw.raw_tags if verbose and raw.raw_tags else None,
    )
