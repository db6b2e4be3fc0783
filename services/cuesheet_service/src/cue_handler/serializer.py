"""CUE sheet serializer producing canonical CUE text from a CueSheet.

Output is semantically equivalent to the parsed input but not byte-identical:
fields are written in a fixed order, comments and unknown commands are not
preserved, and indentation is uniform.
"""

import logging
from pathlib import Path

from ..config import SerializerConfig
from .exceptions import CueSerializationError
from .models import CueSheet, FileData, Index, Position, TrackData


def quote_if_necessary(value: str) -> str:
    """Wrap a value in double quotes when it is empty or contains whitespace."""
    if not value or any(char.isspace() for char in value):
        return f'"{value}"'
    return value


def format_position(position: Position) -> str:
    """Format a position as MM:SS:FF."""
    return str(position)


def format_number(number: int) -> str:
    return f"{number:02d}"


class CueSheetSerializer:
    """Serialize CueSheet objects to CUE text."""

    def __init__(self, indentation: str | None = None, config: SerializerConfig | None = None) -> None:
        """Initialize the serializer.

        Args:
            indentation: Indentation added per nesting level, overrides config
            config: Optional serializer configuration
        """
        self.config = config or SerializerConfig()
        self.indentation = indentation if indentation is not None else self.config.indentation
        self.logger = logging.getLogger(__name__)

    def serialize(self, cue_sheet: CueSheet) -> str:
        """Serialize a sheet to text with newline-terminated lines."""
        return "".join(f"{line}\n" for line in self.serialize_lines(cue_sheet))

    def serialize_lines(self, cue_sheet: CueSheet) -> list[str]:
        """Serialize a sheet to a list of lines without terminators."""
        self.logger.debug(f"Serializing CUE sheet with {len(cue_sheet.files)} files")

        lines: list[str] = []
        indent = ""

        self._add_field(lines, indent, "REM GENRE", cue_sheet.genre)
        self._add_field(lines, indent, "REM DATE", cue_sheet.year)
        self._add_field(lines, indent, "REM DISCID", cue_sheet.discid)
        self._add_field(lines, indent, "REM COMMENT", cue_sheet.comment)
        self._add_field(lines, indent, "CATALOG", cue_sheet.catalog)
        self._add_field(lines, indent, "PERFORMER", cue_sheet.performer)
        self._add_field(lines, indent, "TITLE", cue_sheet.title)
        self._add_field(lines, indent, "SONGWRITER", cue_sheet.songwriter)
        self._add_field(lines, indent, "CDTEXTFILE", cue_sheet.cdtextfile)

        for file_data in cue_sheet.files:
            self._serialize_file(lines, indent, file_data)

        return lines

    def write_file(self, cue_sheet: CueSheet, file_path: str | Path, encoding: str | None = None) -> Path:
        """Serialize a sheet and write it to disk.

        Returns:
            Path of the written file

        Raises:
            CueSerializationError: If the file cannot be written or encoded
        """
        path = Path(file_path)
        content = self.serialize(cue_sheet)

        try:
            with path.open("w", encoding=encoding or self.config.encoding, newline="\n") as f:
                f.write(content)
        except (OSError, UnicodeEncodeError, LookupError) as e:
            raise CueSerializationError(f"Failed to write CUE file {path}: {e}") from e

        self.logger.info(f"Wrote CUE sheet to {path}")
        return path

    def _serialize_file(self, lines: list[str], indent: str, file_data: FileData) -> None:
        parts = ["FILE"]
        if file_data.file is not None:
            parts.append(quote_if_necessary(file_data.file))
        if file_data.file_type is not None:
            parts.append(quote_if_necessary(file_data.file_type))
        lines.append(indent + " ".join(parts))

        for track in file_data.tracks:
            self._serialize_track(lines, indent + self.indentation, track)

    def _serialize_track(self, lines: list[str], indent: str, track: TrackData) -> None:
        parts = ["TRACK"]
        if track.number > -1:
            parts.append(format_number(track.number))
        if track.data_type is not None:
            parts.append(quote_if_necessary(track.data_type))
        lines.append(indent + " ".join(parts))

        child_indent = indent + self.indentation

        self._add_field(lines, child_indent, "ISRC", track.isrc_code)
        self._add_field(lines, child_indent, "PERFORMER", track.performer)
        self._add_field(lines, child_indent, "TITLE", track.title)
        self._add_field(lines, child_indent, "SONGWRITER", track.songwriter)
        self._add_position(lines, child_indent, "PREGAP", track.pregap)
        self._add_position(lines, child_indent, "POSTGAP", track.postgap)

        if track.flags:
            flags = " ".join(quote_if_necessary(flag) for flag in sorted(track.flags))
            lines.append(f"{child_indent}FLAGS {flags}")

        for index in track.indices:
            self._serialize_index(lines, child_indent, index)

    def _serialize_index(self, lines: list[str], indent: str, index: Index) -> None:
        parts = ["INDEX"]
        if index.number > -1:
            parts.append(format_number(index.number))
        if index.position is not None:
            parts.append(format_position(index.position))
        lines.append(indent + " ".join(parts))

    @staticmethod
    def _add_field(lines: list[str], indent: str, command: str, value: str | None) -> None:
        if value is not None:
            lines.append(f"{indent}{command} {quote_if_necessary(value)}")

    @staticmethod
    def _add_position(lines: list[str], indent: str, command: str, value: Position | None) -> None:
        if value is not None:
            lines.append(f"{indent}{command} {format_position(value)}")
