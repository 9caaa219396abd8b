"""Tests for track and disc number resolution."""

from __future__ import annotations

import pytest

from shelfscan.models import AudioMetadata, BookContext, TrackNumbers
from shelfscan.scanner.normalizer import normalize
from shelfscan.scanner.track_numbers import (
    cd_number_from_filename,
    clean_filename,
    resolve_track_numbers,
    strip_book_context,
    track_number_from_filename,
    track_number_from_meta,
)
from tests.conftest import make_raw

NO_BOOK = BookContext()


def _meta(track: object) -> AudioMetadata:
    return normalize(make_raw(track=track))


class TestTrackNumberFromMeta:
    """Tests for the metadata track number."""

    def test_integer_tag(self) -> None:
        """A plain number is used as-is."""
        assert track_number_from_meta(_meta("5")) == 5

    def test_number_with_total(self) -> None:
        """Only the part before the slash counts."""
        assert track_number_from_meta(_meta("5/12")) == 5

    def test_float_is_truncated(self) -> None:
        """Fractional track numbers are truncated."""
        assert track_number_from_meta(_meta("2.9")) == 2

    def test_zero_is_a_number(self) -> None:
        """Zero is a valid metadata track number."""
        assert track_number_from_meta(_meta("0")) == 0

    def test_negative_is_not_a_number(self) -> None:
        """Negative tags give no number."""
        assert track_number_from_meta(_meta("-1")) is None
        assert track_number_from_meta(_meta("-1/5")) is None

    def test_non_ascii_digits_not_a_number(self) -> None:
        """Only ASCII digits in a tag count as a number."""
        assert track_number_from_meta(_meta("٣")) is None
        assert track_number_from_meta(_meta("1_0")) is None

    def test_non_numeric_tag(self) -> None:
        """Non-numeric tags give no number."""
        assert track_number_from_meta(_meta("A/2")) is None

    def test_no_tag(self) -> None:
        """Missing tag gives no number."""
        assert track_number_from_meta(_meta(None)) is None

    def test_no_metadata(self) -> None:
        """No metadata at all gives no number."""
        assert track_number_from_meta(None) is None


class TestStripBookContext:
    """Tests for removing book fields from a filename stem."""

    def test_removes_first_occurrence_only(self) -> None:
        """Each field is removed once."""
        book = BookContext(title="Dune")
        assert strip_book_context("Dune Dune 01", book) == " Dune 01"

    def test_order_title_author_series_year(self) -> None:
        """All four fields are removed."""
        book = BookContext(title="Dune", author="Herbert", series="Saga", publish_year="1965")
        assert strip_book_context("Saga Herbert Dune 1965 - 04", book) == "    - 04"

    def test_empty_context(self) -> None:
        """Nothing is removed without context."""
        assert strip_book_context("Dune 01", NO_BOOK) == "Dune 01"


class TestTrackNumberFromFilename:
    """Tests for the filename track number."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("03 - Chapter.mp3", 3),
            ("Chapter 7.m4a", 7),
            ("Part 12345.mp3", 1234),
            ("00 - Intro.mp3", 0),
            ("Intro.mp3", None),
        ],
    )
    def test_first_digit_run(self, filename: str, expected: int | None) -> None:
        """The first run of up to four digits is the track number."""
        assert track_number_from_filename(filename, NO_BOOK) == expected

    def test_title_digits_ignored(self) -> None:
        """Digits in the book title do not count."""
        book = BookContext(title="2001 A Space Odyssey")
        assert track_number_from_filename("2001 A Space Odyssey - 05.mp3", book) == 5

    def test_year_removed(self) -> None:
        """The publish year is stripped before matching."""
        book = BookContext(title="Dune", publish_year="1965")
        assert track_number_from_filename("Dune 1965 - 07.mp3", book) == 7

    def test_disc_marker_removed(self) -> None:
        """A 'disc N' marker is not the track number."""
        assert track_number_from_filename("disc 2 - 03.mp3", NO_BOOK) == 3

    def test_cd_marker_removed(self) -> None:
        """A 'CDN' marker is not the track number."""
        assert track_number_from_filename("CD1 Track 09.mp3", NO_BOOK) == 9

    def test_extension_ignored(self) -> None:
        """Digits in the extension do not count."""
        assert track_number_from_filename("Intro.mp3", NO_BOOK) is None

    def test_non_ascii_digits_ignored(self) -> None:
        """Only ASCII digits are matched."""
        assert track_number_from_filename("٣ Intro.mp3", NO_BOOK) is None


class TestCdNumberFromFilename:
    """Tests for the filename disc/CD number."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("disc 2 - 03.mp3", 2),
            ("Disc2 - 03.mp3", 2),
            ("CD 12 - 01.mp3", 12),
            ("cd3.mp3", 3),
            ("Track 03.mp3", None),
        ],
    )
    def test_markers(self, filename: str, expected: int | None) -> None:
        """Disc and CD markers give the CD number."""
        assert cd_number_from_filename(filename, NO_BOOK) == expected


class TestCleanFilename:
    """Tests for the cleaned filename stem."""

    def test_strips_context_and_markers(self) -> None:
        """Title, disc and CD markers are removed."""
        book = BookContext(title="Dune")
        assert clean_filename("Dune disc 1 CD2 - 05.mp3", book) == "   - 05"


class TestResolveTrackNumbers:
    """Tests for resolve_track_numbers."""

    def test_disc_and_track(self) -> None:
        """Filename with disc and track gives both numbers."""
        book = BookContext(title="Book Title")
        numbers = resolve_track_numbers(None, book, "Book Title - disc 2 - 03.mp3")
        assert numbers == TrackNumbers(from_meta=None, from_filename=3, cd_from_filename=2)

    def test_cd_promoted_to_track(self) -> None:
        """A CD number with no track number becomes the track number."""
        book = BookContext(title="Book Title")
        numbers = resolve_track_numbers(None, book, "Book Title CD2.mp3")
        assert numbers.from_filename == 2
        assert numbers.cd_from_filename is None

    def test_zero_track_not_replaced_by_cd(self) -> None:
        """A zero filename number is a number; no promotion happens."""
        numbers = resolve_track_numbers(None, NO_BOOK, "disc 2 - 00.mp3")
        assert numbers.from_filename == 0
        assert numbers.cd_from_filename == 2

    def test_metadata_takes_precedence(self) -> None:
        """Metadata number wins over the filename number."""
        numbers = resolve_track_numbers(_meta("5"), NO_BOOK, "07 - Chapter.mp3")
        assert numbers.from_meta == 5
        assert numbers.from_filename == 7
        assert numbers.preferred == 5

    def test_filename_used_without_metadata_number(self) -> None:
        """Filename number is preferred when the tag is not numeric."""
        numbers = resolve_track_numbers(_meta("Intro"), NO_BOOK, "07 - Chapter.mp3")
        assert numbers.preferred == 7

    def test_nothing_found(self) -> None:
        """No tag and no digits gives no numbers at all."""
        numbers = resolve_track_numbers(_meta(None), NO_BOOK, "Intro.mp3")
        assert numbers == TrackNumbers()
        assert numbers.preferred is None
