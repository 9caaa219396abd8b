"""Data models for shelfscan.

Canonical metadata is immutable per scan. Audio file and track records are
owned by the :class:`Audiobook` aggregate, which keeps both collections as
ordered maps keyed by inode so no two records can alias the same list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from shelfscan.exceptions import DuplicateTrackNumberError, ShelfscanError

logger = logging.getLogger(__name__)

# Parsed track tag parts: numbers when they parse, the original text otherwise
TagNumber = int | float | str


# =============================================================================
# Tags
# =============================================================================

# Alternate tag spellings seen across ID3, MP4 atoms and Vorbis comments
TAG_ALIASES: dict[str, str] = {
    "albumartist": "album_artist",
    "album artist": "album_artist",
    "tracknumber": "track",
    "trck": "track",
    "discnumber": "disc",
    "tpos": "disc",
    "mvnm": "series",
    "mvin": "series_part",
    "series-part": "series_part",
    "seriespart": "series_part",
    "desc": "description",
    "lang": "language",
}


@dataclass(frozen=True)
class FileTags:
    """Tags embedded in an audio file.

    Known tags get their own attribute; anything else lands in ``extra``
    untouched. Only truthy values are kept.
    """

    title: Any = None
    subtitle: Any = None
    artist: Any = None
    album: Any = None
    album_artist: Any = None
    genre: Any = None
    date: Any = None
    year: Any = None
    track: Any = None
    disc: Any = None
    composer: Any = None
    publisher: Any = None
    comment: Any = None
    description: Any = None
    series: Any = None
    series_part: Any = None
    language: Any = None
    isbn: Any = None
    asin: Any = None
    encoder: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def known_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls) if f.name != "extra")

    @classmethod
    def from_mapping(cls, tags: dict[str, Any]) -> FileTags:
        """Build from a tag-name → value mapping.

        The first truthy value wins when two spellings of the same tag are
        present (e.g. ``album_artist`` and ``albumartist``).
        """
        known = cls.known_names()
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for raw_name, value in tags.items():
            if not value:
                continue
            name = str(raw_name).lower()
            canonical = TAG_ALIASES.get(name, name)
            if canonical in known:
                values.setdefault(canonical, value)
            else:
                extra[name] = value
        return cls(**values, extra=extra)

    def items(self) -> Iterator[tuple[str, Any]]:
        """Iterate over every present tag, known tags first."""
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is not None:
                yield f.name, value
        yield from self.extra.items()

    def as_dict(self) -> dict[str, Any]:
        return dict(self.items())

    def __bool__(self) -> bool:
        return any(True for _ in self.items())


# =============================================================================
# Canonical Metadata
# =============================================================================


@dataclass(frozen=True)
class Chapter:
    """Chapter marker (times in seconds)."""

    id: int | str | None
    start: float
    end: float
    title: str | None = None


@dataclass(frozen=True)
class AudioMetadata:
    """Normalized technical and tag metadata for one file."""

    format: str | None
    duration: float
    size: int
    bit_rate: int | None = None
    codec: str | None = None
    time_base: str | None = None
    language: str | None = None
    channel_layout: str | None = None
    channels: int | None = None
    sample_rate: int | None = None
    chapters: tuple[Chapter, ...] = ()
    embedded_cover_art: str | None = None
    tags: FileTags = field(default_factory=FileTags)
    track_number: TagNumber | None = None
    track_total: TagNumber | None = None
    raw_tags: dict[str, Any] | None = None

    @property
    def has_cover_art(self) -> bool:
        return self.embedded_cover_art is not None

    def to_dict(self) -> dict[str, Any]:
        """Flatten for JSON output; tags use their ``file_tag_`` field names."""
        data: dict[str, Any] = {
            "format": self.format,
            "duration": self.duration,
            "size": self.size,
            "bit_rate": self.bit_rate,
            "codec": self.codec,
            "time_base": self.time_base,
            "language": self.language,
            "channel_layout": self.channel_layout,
            "channels": self.channels,
            "sample_rate": self.sample_rate,
            "chapters": [
                {"id": c.id, "start": c.start, "end": c.end, "title": c.title}
                for c in self.chapters
            ],
        }
        if self.embedded_cover_art:
            data["embedded_cover_art"] = self.embedded_cover_art
        for name, value in self.tags.items():
            data[f"file_tag_{name}"] = value
        if self.track_number is not None:
            data["trackNumber"] = self.track_number
        if self.track_total is not None:
            data["trackTotal"] = self.track_total
        if self.raw_tags is not None:
            data["rawTags"] = self.raw_tags
        return data


@dataclass(frozen=True)
class TrackNumbers:
    """Ordering hints derived for one file."""

    from_meta: int | None = None
    from_filename: int | None = None
    cd_from_filename: int | None = None

    @property
    def preferred(self) -> int | None:
        """Metadata number if present, else the filename number."""
        if self.from_meta is not None:
            return self.from_meta
        return self.from_filename


@dataclass(frozen=True)
class BookContext:
    """Book fields that commonly leak into audio filenames."""

    title: str | None = None
    author: str | None = None
    series: str | None = None
    publish_year: str | None = None


# =============================================================================
# Audio Files and Tracks
# =============================================================================


@dataclass(frozen=True)
class NewAudioFile:
    """A discovered file that has not been scanned yet."""

    ino: str
    path: str
    full_path: Path
    filename: str
    ext: str

    @classmethod
    def from_path(cls, full_path: Path, root: Path | None = None) -> NewAudioFile:
        """Describe a file on disk; ``path`` is relative to ``root`` when given."""
        full_path = Path(full_path)
        rel = full_path.relative_to(root) if root else full_path
        return cls(
            ino=str(full_path.stat().st_ino),
            path=rel.as_posix(),
            full_path=full_path,
            filename=full_path.name,
            ext=full_path.suffix,
        )


@dataclass
class AudioFileRecord:
    """An audio file known to an audiobook, with its latest scan results."""

    ino: str
    path: str
    full_path: Path
    filename: str
    ext: str
    metadata: AudioMetadata | None = None
    track_num_from_meta: int | None = None
    track_num_from_filename: int | None = None
    cd_num_from_filename: int | None = None
    index: int | None = None
    invalid: bool = False
    error: str | None = None
    exclude: bool = False

    @classmethod
    def from_scan(
        cls,
        new_file: NewAudioFile,
        metadata: AudioMetadata,
        numbers: TrackNumbers,
    ) -> AudioFileRecord:
        return cls(
            ino=new_file.ino,
            path=new_file.path,
            full_path=new_file.full_path,
            filename=new_file.filename,
            ext=new_file.ext,
            metadata=metadata,
            track_num_from_meta=numbers.from_meta,
            track_num_from_filename=numbers.from_filename,
            cd_num_from_filename=numbers.cd_from_filename,
        )

    @property
    def track_numbers(self) -> TrackNumbers:
        return TrackNumbers(
            from_meta=self.track_num_from_meta,
            from_filename=self.track_num_from_filename,
            cd_from_filename=self.cd_num_from_filename,
        )

    def update_metadata(self, metadata: AudioMetadata, numbers: TrackNumbers) -> bool:
        """Apply a rescan; return True if anything observable changed."""
        changed: list[str] = []
        if metadata != self.metadata:
            if self.metadata is None:
                changed.append("metadata")
            else:
                changed.extend(
                    f.name
                    for f in fields(metadata)
                    if getattr(metadata, f.name) != getattr(self.metadata, f.name)
                )
            self.metadata = metadata
        if numbers != self.track_numbers:
            changed.append("track_numbers")
            self.track_num_from_meta = numbers.from_meta
            self.track_num_from_filename = numbers.from_filename
            self.cd_num_from_filename = numbers.cd_from_filename

        if changed:
            logger.debug(f"Updated {', '.join(changed)} for {self.filename!r}")
        return bool(changed)

    def mark_invalid(self, error: ShelfscanError) -> None:
        self.invalid = True
        self.error = str(error)
        self.index = None


@dataclass
class TrackRecord:
    """A committed member of an audiobook's ordered track list."""

    ino: str
    index: int
    path: str
    full_path: Path
    filename: str
    ext: str
    metadata: AudioMetadata | None = None

    @classmethod
    def from_audio_file(cls, audio_file: AudioFileRecord, index: int) -> TrackRecord:
        return cls(
            ino=audio_file.ino,
            index=index,
            path=audio_file.path,
            full_path=audio_file.full_path,
            filename=audio_file.filename,
            ext=audio_file.ext,
            metadata=audio_file.metadata,
        )

    @property
    def duration(self) -> float:
        return self.metadata.duration if self.metadata else 0.0

    def sync_metadata(self, audio_file: AudioFileRecord) -> None:
        """Copy the audio file's current metadata onto this track."""
        self.metadata = audio_file.metadata
        self.full_path = audio_file.full_path
        self.filename = audio_file.filename
        self.ext = audio_file.ext


# =============================================================================
# Aggregate
# =============================================================================


class Audiobook:
    """In-memory audiobook aggregate.

    Audio files are kept in insertion (or explicitly sorted) order; tracks are
    always ordered by index and never share an index.
    """

    def __init__(self, id: str = "", book: BookContext | None = None) -> None:
        self.id = id
        self.book = book or BookContext()
        self._audio_files: dict[str, AudioFileRecord] = {}
        self._tracks: dict[str, TrackRecord] = {}

    def __repr__(self) -> str:
        return (
            f"Audiobook(id={self.id!r}, title={self.title!r}, "
            f"audio_files={len(self._audio_files)}, tracks={len(self._tracks)})"
        )

    @property
    def title(self) -> str:
        return self.book.title or self.id

    @property
    def audio_files(self) -> list[AudioFileRecord]:
        return list(self._audio_files.values())

    @property
    def tracks(self) -> list[TrackRecord]:
        return list(self._tracks.values())

    # -- audio files --------------------------------------------------------

    def get_audio_file(self, ino: str) -> AudioFileRecord | None:
        return self._audio_files.get(ino)

    def add_audio_file(self, record: AudioFileRecord) -> AudioFileRecord:
        """Register a scanned file; an existing record for the same inode wins."""
        existing = self._audio_files.get(record.ino)
        if existing is not None:
            logger.warning(
                f"Audio file {record.filename!r} already registered as {existing.path!r}"
            )
            return existing
        self._audio_files[record.ino] = record
        return record

    def sort_audio_files(self, key: Callable[[AudioFileRecord], Any]) -> None:
        ordered = sorted(self._audio_files.values(), key=key)
        self._audio_files = {af.ino: af for af in ordered}

    # -- tracks -------------------------------------------------------------

    def track_indices(self) -> set[int]:
        return {t.index for t in self._tracks.values()}

    def find_track_by_ino(self, ino: str) -> TrackRecord | None:
        return self._tracks.get(ino)

    def find_track_by_path(self, path: str) -> TrackRecord | None:
        return next((t for t in self._tracks.values() if t.path == path), None)

    def add_track(self, track: TrackRecord) -> None:
        """Commit a track, keeping the list ordered by index.

        Raises:
            DuplicateTrackNumberError: Another file already holds this index
        """
        for other in self._tracks.values():
            if other.index == track.index and other.ino != track.ino:
                raise DuplicateTrackNumberError(path=track.path, index=track.index)
        needs_sort = bool(self._tracks) and (
            track.ino in self._tracks or track.index < max(self.track_indices())
        )
        self._tracks[track.ino] = track
        if needs_sort:
            self._sort_tracks()

    def rekey_track(self, track: TrackRecord, ino: str) -> None:
        """Move a track to a new inode, keeping its position."""
        self._tracks = {
            (ino if key == track.ino else key): value for key, value in self._tracks.items()
        }
        track.ino = ino

    def _sort_tracks(self) -> None:
        ordered = sorted(self._tracks.values(), key=lambda t: t.index)
        self._tracks = {t.ino: t for t in ordered}


# =============================================================================
# Results
# =============================================================================


@dataclass
class ImportResult:
    """Outcome of one batch import."""

    tracks: list[TrackRecord] = field(default_factory=list)
    invalid: int = 0
    duplicates: int = 0
    failed: int = 0
    errors: list[ShelfscanError] = field(default_factory=list)
    aborted: bool = False
    cancelled: bool = False

    @property
    def committed(self) -> int:
        return len(self.tracks)

    @property
    def success(self) -> bool:
        return self.committed > 0


@dataclass
class TrackDiagnostic:
    """Current vs. inferred track numbers for one track."""

    filename: str
    current_track_num: int
    track_num_from_filename: int | None
    track_num_from_meta: int | None
    scan_data_track_num: Any = None
    raw_tags: dict[str, Any] | None = None
    error: str | None = None

    @property
    def agrees(self) -> bool:
        """True if the inferred number matches the committed index."""
        inferred = TrackNumbers(self.track_num_from_meta, self.track_num_from_filename).preferred
        return inferred == self.current_track_num

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "currentTrackNum": self.current_track_num,
            "trackNumFromFilename": self.track_num_from_filename,
            "trackNumFromMeta": self.track_num_from_meta,
            "scanDataTrackNum": self.scan_data_track_num,
            "rawTags": self.raw_tags,
            "error": self.error,
        }
