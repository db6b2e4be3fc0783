"""Unit tests for CUE serializer."""

from pathlib import Path

import pytest

from services.cuesheet_service.src.config import SerializerConfig
from services.cuesheet_service.src.cue_handler.exceptions import CueSerializationError
from services.cuesheet_service.src.cue_handler.models import CueSheet, FileData, Index, Position, TrackData
from services.cuesheet_service.src.cue_handler.parser import CueParser
from services.cuesheet_service.src.cue_handler.serializer import (
    CueSheetSerializer,
    format_position,
    quote_if_necessary,
)


def build_sheet() -> CueSheet:
    """Build a sheet by hand using every documented field."""
    sheet = CueSheet(
        genre="Electronic",
        year="2001",
        discid="8E0B710B",
        comment="Mixed live",
        catalog="1234567890123",
        performer="Various Artists",
        title="Complex Album",
        songwriter="Someone",
        cdtextfile="cdtext.dat",
    )

    first_file = sheet.add_file(FileData(file="disc one.wav", file_type="WAVE"))
    first = first_file.add_track(
        TrackData(
            number=1,
            data_type="AUDIO",
            isrc_code="GBUM71029078",
            performer="Artist 1",
            title="Opening",
            songwriter="Writer 1",
            pregap=Position(0, 2, 0),
            postgap=Position(0, 1, 0),
            flags={"PRE", "DCP"},
        )
    )
    first.add_index(Index(number=0, position=Position(0, 0, 0)))
    first.add_index(Index(number=1, position=Position(0, 2, 0)))

    second = first_file.add_track(TrackData(number=2, data_type="AUDIO", title="Second"))
    second.add_index(Index(number=1, position=Position(4, 12, 37)))

    second_file = sheet.add_file(FileData(file="disc2.wav", file_type="WAVE"))
    third = second_file.add_track(TrackData(number=3, data_type="AUDIO"))
    third.add_index(Index(number=1, position=Position(0, 0, 0)))

    return sheet


class TestHelpers:
    """Test module level formatting helpers."""

    def test_quote_if_necessary(self):
        """Only values with whitespace, or empty values, are quoted."""
        assert quote_if_necessary("a.wav") == "a.wav"
        assert quote_if_necessary("my song.wav") == '"my song.wav"'
        assert quote_if_necessary("tab\there") == '"tab\there"'
        assert quote_if_necessary("") == '""'

    def test_format_position(self):
        """Positions are formatted with two digits per field."""
        assert format_position(Position(1, 2, 3)) == "01:02:03"
        assert format_position(Position(0, 0, 80)) == "00:00:80"


class TestCueSheetSerializer:
    """Test CueSheetSerializer class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.serializer = CueSheetSerializer()
        self.parser = CueParser()

    def test_serialize_simple_sheet(self):
        """Scenario: one file, one track, one index."""
        sheet = self.parser.parse('FILE "a.wav" WAVE\n  TRACK 01 AUDIO\n    INDEX 01 00:00:00\n')

        assert self.serializer.serialize(sheet) == "FILE a.wav WAVE\n  TRACK 01 AUDIO\n    INDEX 01 00:00:00\n"

    def test_canonical_order(self):
        """Fields are written in a fixed order regardless of input order."""
        lines = self.serializer.serialize_lines(build_sheet())

        assert lines == [
            "REM GENRE Electronic",
            "REM DATE 2001",
            "REM DISCID 8E0B710B",
            'REM COMMENT "Mixed live"',
            "CATALOG 1234567890123",
            'PERFORMER "Various Artists"',
            'TITLE "Complex Album"',
            "SONGWRITER Someone",
            "CDTEXTFILE cdtext.dat",
            'FILE "disc one.wav" WAVE',
            "  TRACK 01 AUDIO",
            "    ISRC GBUM71029078",
            '    PERFORMER "Artist 1"',
            "    TITLE Opening",
            '    SONGWRITER "Writer 1"',
            "    PREGAP 00:02:00",
            "    POSTGAP 00:01:00",
            "    FLAGS DCP PRE",
            "    INDEX 00 00:00:00",
            "    INDEX 01 00:02:00",
            "  TRACK 02 AUDIO",
            "    TITLE Second",
            "    INDEX 01 04:12:37",
            "FILE disc2.wav WAVE",
            "  TRACK 03 AUDIO",
            "    INDEX 01 00:00:00",
        ]

    def test_unset_fields_omitted(self):
        """Unset values produce no lines."""
        sheet = CueSheet()
        sheet.add_file(FileData(file="a.wav", file_type="WAVE")).add_track(TrackData(number=1, data_type="AUDIO"))

        assert self.serializer.serialize(sheet) == "FILE a.wav WAVE\n  TRACK 01 AUDIO\n"

    def test_empty_sheet(self):
        """An empty sheet serializes to nothing."""
        assert self.serializer.serialize(CueSheet()) == ""

    def test_empty_flags_not_written(self):
        """An empty flag set emits no FLAGS line."""
        sheet = self.parser.parse('FILE "a.wav" WAVE\nTRACK 01 AUDIO\nFLAGS')

        assert "FLAGS" not in self.serializer.serialize(sheet)

    def test_unset_numbers_omitted(self):
        """Track and index numbers of -1 are left out."""
        sheet = CueSheet()
        track = sheet.add_file(FileData(file="a.wav", file_type="WAVE")).add_track(TrackData(data_type="AUDIO"))
        track.add_index(Index(position=Position(0, 0, 0)))
        track.add_index(Index(number=2))

        assert self.serializer.serialize_lines(sheet) == [
            "FILE a.wav WAVE",
            "  TRACK AUDIO",
            "    INDEX 00:00:00",
            "    INDEX 02",
        ]

    @pytest.mark.parametrize(
        "number, expected", [(0, "TRACK 00"), (7, "TRACK 07"), (99, "TRACK 99"), (100, "TRACK 100")]
    )
    def test_track_number_padding(self, number, expected):
        """Track numbers are zero padded to two digits."""
        sheet = CueSheet()
        sheet.add_file(FileData()).add_track(TrackData(number=number))

        assert self.serializer.serialize_lines(sheet)[1].strip() == expected

    def test_anonymous_file(self):
        """A file without name or type is written as a bare FILE line."""
        sheet = self.parser.parse("TRACK 01 AUDIO")

        assert self.serializer.serialize(sheet) == "FILE\n  TRACK 01 AUDIO\n"

    def test_custom_indentation(self):
        """Indentation is configurable."""
        sheet = self.parser.parse('FILE "a.wav" WAVE\nTRACK 01 AUDIO\nINDEX 01 00:00:00')

        assert CueSheetSerializer("\t").serialize(sheet) == "FILE a.wav WAVE\n\tTRACK 01 AUDIO\n\t\tINDEX 01 00:00:00\n"

    def test_indentation_from_config(self):
        """Configured indentation applies when none is passed explicitly."""
        serializer = CueSheetSerializer(config=SerializerConfig(indentation="    "))
        sheet = self.parser.parse('FILE "a.wav" WAVE\nTRACK 01 AUDIO')

        assert serializer.serialize_lines(sheet) == ["FILE a.wav WAVE", "    TRACK 01 AUDIO"]

    def test_round_trip_built_sheet(self):
        """Parsing serialized output restores every field and the structure."""
        sheet = build_sheet()

        reparsed = self.parser.parse(self.serializer.serialize(sheet))

        assert reparsed == sheet
        assert reparsed.messages == ()

    def test_round_trip_parsed_sheet(self, sample_cue_content):
        """A parsed sheet survives serialization and reparsing unchanged."""
        sheet = self.parser.parse(sample_cue_content)

        reparsed = self.parser.parse(self.serializer.serialize(sheet))

        assert reparsed == sheet
        assert [len(f.tracks) for f in reparsed.files] == [2, 1]

    def test_round_trip_empty_values(self):
        """Empty strings stay empty strings."""
        sheet = CueSheet(title="", comment="")

        reparsed = self.parser.parse(self.serializer.serialize(sheet))

        assert reparsed.title == ""
        assert reparsed.comment == ""

    @pytest.mark.parametrize("separator", ["\x85", "\u2028", "\x0c"])
    def test_round_trip_unicode_breaks(self, separator):
        """Values holding Unicode line breaks come back whole."""
        sheet = CueSheet(title=f"x{separator}y")

        reparsed = self.parser.parse(self.serializer.serialize(sheet))

        assert reparsed.title == f"x{separator}y"
        assert reparsed.messages == ()

    def test_round_trip_unnumbered_index(self):
        """An index without number keeps its position."""
        sheet = CueSheet()
        audio_file = sheet.add_file(FileData(file="a.wav", file_type="WAVE"))
        track = audio_file.add_track(TrackData(number=1, data_type="AUDIO"))
        track.add_index(Index(position=Position(0, 0, 0)))

        reparsed = self.parser.parse(self.serializer.serialize(sheet))

        assert reparsed == sheet
        assert reparsed.files[0].tracks[0].indices[0].position == Position(0, 0, 0)

    def test_write_file(self, tmp_path: Path):
        """Test writing serialized output to disk."""
        path = self.serializer.write_file(build_sheet(), tmp_path / "out.cue")

        assert path.read_text(encoding="utf-8") == self.serializer.serialize(build_sheet())

    def test_write_file_failure(self, tmp_path: Path):
        """Unwritable targets raise CueSerializationError."""
        with pytest.raises(CueSerializationError):
            self.serializer.write_file(build_sheet(), tmp_path / "missing" / "out.cue")

    def test_write_file_unencodable(self, tmp_path: Path):
        """Values the target encoding cannot represent raise CueSerializationError."""
        sheet = CueSheet(title="Ünïcode")

        with pytest.raises(CueSerializationError):
            self.serializer.write_file(sheet, tmp_path / "out.cue", encoding="ascii")
