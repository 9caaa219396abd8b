"""Tests for raw probe result schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shelfscan.schemas.probe import RawProbeResult, validate_probe_result


class TestRawProbeResult:
    """Tests for RawProbeResult validation."""

    def test_minimal(self) -> None:
        """Every field is optional at the schema level."""
        result = RawProbeResult()
        assert result.audio_streams == []
        assert result.video_stream is None
        assert result.tags == {}
        assert result.raw_tags is None

    def test_full(self) -> None:
        """Nested streams and chapters validate."""
        result = validate_probe_result(
            {
                "format": "mp4",
                "duration": 3600.5,
                "size": 52_000_000,
                "bit_rate": 115000,
                "audio_streams": [{"codec": "aac", "is_default": True, "channels": 2}],
                "video_stream": {"codec": "mjpeg"},
                "chapters": [{"id": 0, "start": 0, "end": 300, "title": "Opening"}],
                "tags": {"title": "Dune"},
            }
        )
        assert result.duration == 3600.5
        assert result.audio_streams[0].is_default
        assert result.video_stream is not None
        assert result.video_stream.codec == "mjpeg"
        assert result.chapters[0].end == 300.0

    def test_extra_fields_ignored(self) -> None:
        """Unknown fields never break validation."""
        result = validate_probe_result({"duration": 1.0, "probe_score": 100})
        assert not hasattr(result, "probe_score")

    def test_file_tag_fields_folded(self) -> None:
        """Flat file_tag_* fields end up in tags."""
        result = validate_probe_result({"file_tag_title": "Dune", "file_tag_track": "1/3"})
        assert result.tags == {"title": "Dune", "track": "1/3"}
        assert result.file_tag("track") == "1/3"

    def test_tags_mapping_wins_over_flat_fields(self) -> None:
        """A ``tags`` entry overrides the same flat field."""
        result = validate_probe_result({"file_tag_title": "Old", "tags": {"title": "New"}})
        assert result.tags["title"] == "New"

    def test_tag_names_lowercased(self) -> None:
        """Tag names are case-insensitive."""
        result = validate_probe_result({"tags": {"TITLE": "Dune", "Track": "2"}})
        assert result.tags == {"title": "Dune", "track": "2"}
        assert result.file_tag("TITLE") == "Dune"

    def test_raw_tags_alias(self) -> None:
        """Raw tags are accepted under their camelCase name."""
        result = validate_probe_result({"rawTags": {"TRACK": "1"}})
        assert result.raw_tags == {"TRACK": "1"}

    def test_invalid_duration(self) -> None:
        """Non-numeric durations are rejected."""
        with pytest.raises(ValidationError):
            validate_probe_result({"duration": "soon"})
