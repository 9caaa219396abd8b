"""Pydantic schemas for raw media-probe results.

A probe result is whatever the probing collaborator hands back for one file:
container facts, the audio streams, an optional video stream (embedded cover
art shows up as one), chapters and the file's tags. These schemas only
validate shape; deciding which stream counts and which fields are required is
the normalizer's job.

Uses extra="ignore" so new fields from the probe tool never break
validation. Tags may be given either as a ``tags`` mapping or as flat
``file_tag_<name>`` fields; both end up in ``tags``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

FILE_TAG_PREFIX = "file_tag_"


class RawAudioStream(BaseModel):
    """One audio stream as reported by the probe."""

    is_default: bool = False
    bit_rate: int | None = None
    codec: str | None = None
    time_base: str | None = None
    language: str | None = None
    channel_layout: str | None = None
    channels: int | None = None
    sample_rate: int | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}


class RawVideoStream(BaseModel):
    """Video stream; for audiobooks this is almost always embedded cover art."""

    codec: str | None = None

    model_config = {"extra": "ignore"}


class RawChapter(BaseModel):
    """Chapter marker embedded in the container."""

    id: int | str | None = None
    start: float = 0.0
    end: float = 0.0
    title: str | None = None

    model_config = {"extra": "ignore"}


class RawProbeResult(BaseModel):
    """Result of probing one file.

    ``duration`` and ``size`` are optional here so that an incomplete probe
    still validates; the normalizer rejects it afterwards.
    """

    format: str | None = None
    duration: float | None = None
    size: int | None = None
    bit_rate: int | None = None
    audio_streams: list[RawAudioStream] = Field(default_factory=list)
    video_stream: RawVideoStream | None = None
    chapters: list[RawChapter] = Field(default_factory=list)
    tags: dict[str, Any] = Field(default_factory=dict)
    raw_tags: dict[str, Any] | None = Field(default=None, alias="rawTags")

    model_config = {"extra": "ignore", "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def collect_file_tags(cls, data: Any) -> Any:
        """Fold flat ``file_tag_<name>`` fields into ``tags``."""
        if not isinstance(data, dict):
            return data
        flat = {
            key[len(FILE_TAG_PREFIX) :]: value
            for key, value in data.items()
            if isinstance(key, str) and key.startswith(FILE_TAG_PREFIX)
        }
        if not flat:
            return data
        data = {k: v for k, v in data.items() if not str(k).startswith(FILE_TAG_PREFIX)}
        data["tags"] = {**flat, **(data.get("tags") or {})}
        return data

    @field_validator("tags", mode="before")
    @classmethod
    def lowercase_tag_names(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(key).lower(): value for key, value in v.items()}
        return v

    def file_tag(self, name: str) -> Any:
        """Get a tag value by name (case-insensitive)."""
        return self.tags.get(name.lower())


def validate_probe_result(data: dict[str, Any]) -> RawProbeResult:
    """Validate a raw probe result dict.

    Raises:
        pydantic.ValidationError: If the data has the wrong shape
    """
    return RawProbeResult.model_validate(data)
