"""Tests for rescanning an audiobook's known audio files."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from shelfscan.exceptions import ProbeFailureError
from shelfscan.models import AudioFileRecord, Audiobook, TrackRecord
from shelfscan.scanner.importer import import_audio_files
from shelfscan.scanner.normalizer import normalize
from shelfscan.scanner.rescan import rescan_audio_files, sync_track
from shelfscan.settings import ScannerSettings
from tests.conftest import FakeProber, make_new_file, make_raw


@pytest.fixture
def imported(settings: ScannerSettings) -> tuple[Audiobook, FakeProber]:
    """Audiobook with two committed tracks and the prober that scanned them."""
    prober = FakeProber({"01.mp3": make_raw("1"), "02.mp3": make_raw("2")})
    audiobook = Audiobook("ab_1")
    import_audio_files(
        audiobook,
        [make_new_file("01.mp3"), make_new_file("02.mp3")],
        prober=prober,
        settings=settings,
    )
    return audiobook, prober


def _record(ino: str, filename: str, track: str = "1", exclude: bool = False) -> AudioFileRecord:
    return AudioFileRecord(
        ino=ino,
        path=filename,
        full_path=Path("/books/dune") / filename,
        filename=filename,
        ext=".mp3",
        metadata=normalize(make_raw(track)),
        track_num_from_meta=int(track),
        exclude=exclude,
    )


class TestRescanAudioFiles:
    """Tests for rescan_audio_files."""

    def test_unchanged_files(
        self, imported: tuple[Audiobook, FakeProber], settings: ScannerSettings
    ) -> None:
        """Identical metadata means no updates and untouched tracks."""
        audiobook, prober = imported
        before = [t.metadata for t in audiobook.tracks]

        assert rescan_audio_files(audiobook, prober=prober, settings=settings) == 0
        assert [t.metadata for t in audiobook.tracks] == before
        assert all(t.metadata is m for t, m in zip(audiobook.tracks, before, strict=True))

    def test_changed_metadata_synced(
        self, imported: tuple[Audiobook, FakeProber], settings: ScannerSettings
    ) -> None:
        """A changed file updates its audio file and its track."""
        audiobook, prober = imported
        prober.results["02.mp3"] = make_raw("2", tags={"title": "Retagged"})

        assert rescan_audio_files(audiobook, prober=prober, settings=settings) == 1

        track = audiobook.find_track_by_ino("02.mp3")
        assert track is not None
        assert track.metadata is not None
        assert track.metadata.tags.title == "Retagged"
        assert track.index == 2

    def test_track_index_not_reassigned(
        self, imported: tuple[Audiobook, FakeProber], settings: ScannerSettings
    ) -> None:
        """A new track tag updates the numbers but not the committed index."""
        audiobook, prober = imported
        prober.results["01.mp3"] = make_raw("7")

        assert rescan_audio_files(audiobook, prober=prober, settings=settings) == 1

        af = audiobook.get_audio_file("01.mp3")
        assert af is not None
        assert af.track_num_from_meta == 7
        assert [t.index for t in audiobook.tracks] == [1, 2]

    def test_probe_failure_skipped(
        self,
        imported: tuple[Audiobook, FakeProber],
        settings: ScannerSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A file that fails to probe keeps its old metadata."""
        audiobook, prober = imported
        af = audiobook.get_audio_file("01.mp3")
        assert af is not None
        before = af.metadata
        prober.results["01.mp3"] = ProbeFailureError("ffprobe failed for 01.mp3")

        with caplog.at_level(logging.ERROR, logger="shelfscan"):
            assert rescan_audio_files(audiobook, prober=prober, settings=settings) == 0

        assert af.metadata is before
        assert "Scan failed for 01.mp3" in caplog.text

    def test_cancel_before_start(
        self, imported: tuple[Audiobook, FakeProber], settings: ScannerSettings
    ) -> None:
        """A cancelled rescan probes nothing."""
        audiobook, prober = imported
        prober.calls.clear()
        cancel = threading.Event()
        cancel.set()

        assert rescan_audio_files(audiobook, prober=prober, settings=settings, cancel=cancel) == 0
        assert prober.calls == []

    def test_pooled_rescan(
        self, imported: tuple[Audiobook, FakeProber], settings: ScannerSettings
    ) -> None:
        """Pooled rescans apply the same updates."""
        audiobook, prober = imported
        prober.results["01.mp3"] = make_raw("1", tags={"title": "One"})
        prober.results["02.mp3"] = make_raw("2", tags={"title": "Two"})

        updates = rescan_audio_files(
            audiobook, prober=prober, settings=settings.model_copy(update={"max_workers": 2})
        )

        assert updates == 2
        titles = [t.metadata.tags.title for t in audiobook.tracks if t.metadata]
        assert titles == ["One", "Two"]


class TestSyncTrack:
    """Tests for matching an updated audio file to its track."""

    def test_inode_match(self) -> None:
        """The track with the same inode gets the new metadata."""
        audiobook = Audiobook("ab_1")
        af = audiobook.add_audio_file(_record("10", "01.mp3"))
        track = TrackRecord.from_audio_file(af, 1)
        audiobook.add_track(track)
        af.metadata = normalize(make_raw("1", tags={"title": "New"}))

        sync_track(audiobook, af)

        assert track.metadata is af.metadata

    def test_path_fallback_rekeys_track(self, caplog: pytest.LogCaptureFixture) -> None:
        """A replaced file is matched by path and the track takes its inode."""
        audiobook = Audiobook("ab_1")
        old = TrackRecord.from_audio_file(_record("10", "01.mp3"), 1)
        second = TrackRecord.from_audio_file(_record("11", "02.mp3", "2"), 2)
        audiobook.add_track(old)
        audiobook.add_track(second)
        af = audiobook.add_audio_file(_record("99", "01.mp3"))
        af.metadata = normalize(make_raw("1", tags={"title": "Replaced"}))

        with caplog.at_level(logging.ERROR, logger="shelfscan"):
            sync_track(audiobook, af)

        assert audiobook.find_track_by_ino("10") is None
        assert audiobook.find_track_by_ino("99") is old
        assert old.ino == "99"
        assert old.metadata is af.metadata
        assert [t.ino for t in audiobook.tracks] == ["99", "11"]
        assert "inode mismatch" in caplog.text

    def test_path_fallback_through_rescan(self, settings: ScannerSettings) -> None:
        """A rescan of a replaced file updates exactly one track."""
        audiobook = Audiobook("ab_1")
        audiobook.add_track(TrackRecord.from_audio_file(_record("10", "01.mp3"), 1))
        audiobook.add_audio_file(_record("99", "01.mp3"))
        prober = FakeProber({"01.mp3": make_raw("1", tags={"title": "Replaced"})})

        assert rescan_audio_files(audiobook, prober=prober, settings=settings) == 1

        assert len(audiobook.tracks) == 1
        track = audiobook.tracks[0]
        assert track.ino == "99"
        assert track.metadata is not None
        assert track.metadata.tags.title == "Replaced"

    def test_orphan_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """A file with no track at all is logged, nothing is created."""
        audiobook = Audiobook("ab_1")
        af = audiobook.add_audio_file(_record("10", "01.mp3"))

        with caplog.at_level(logging.ERROR, logger="shelfscan"):
            sync_track(audiobook, af)

        assert audiobook.tracks == []
        assert "has no matching track" in caplog.text

    def test_excluded_file_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """Excluded files without a track are not orphans."""
        audiobook = Audiobook("ab_1")
        af = audiobook.add_audio_file(_record("10", "01.mp3", exclude=True))

        with caplog.at_level(logging.ERROR, logger="shelfscan"):
            sync_track(audiobook, af)

        assert caplog.text == ""
