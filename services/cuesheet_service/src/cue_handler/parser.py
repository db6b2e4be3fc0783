"""Tolerant CUE sheet parser.

Malformed content never aborts a parse. Every deviation from the grammar is
recorded as a diagnostic on the returned sheet and a fallback is applied, so
callers decide for themselves whether the result is usable.

Example usage:
    >>> from cue_handler.parser import CueParser
    >>> parser = CueParser()

    # Parse from file
    >>> cue_sheet = parser.parse_file('mix.cue')
    >>> for message in cue_sheet.messages:
    ...     print(message)

    # Parse from string
    >>> cue_content = '''
    ... FILE "audio.wav" WAVE
    ...   TRACK 01 AUDIO
    ...     TITLE "First Track"
    ...     INDEX 01 00:00:00
    ... '''
    >>> cue_sheet = parser.parse(cue_content)
    >>> cue_sheet.files[0].tracks[0].start_position
    Position(minutes=0, seconds=0, frames=0)
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import chardet

from ..config import ParserConfig
from .exceptions import CueParsingError, InvalidTimeFormatError
from .messages import LineOfInput
from .models import UNSET_NUMBER, CueSheet, FileData, Index, Position, TrackData

COMMANDS = frozenset(
    {
        "REM",
        "CATALOG",
        "PERFORMER",
        "TITLE",
        "SONGWRITER",
        "CDTEXTFILE",
        "FILE",
        "TRACK",
        "ISRC",
        "PREGAP",
        "POSTGAP",
        "FLAGS",
        "INDEX",
    }
)

# REM sub-command -> CueSheet attribute
REM_FIELDS = {
    "GENRE": "genre",
    "DATE": "year",
    "DISCID": "discid",
    "COMMENT": "comment",
}

FILE_TYPES = frozenset({"BINARY", "MOTOROLA", "AIFF", "WAVE", "MP3"})
TRACK_DATA_TYPES = frozenset(
    {"AUDIO", "CDG", "MODE1/2048", "MODE1/2352", "MODE2/2336", "MODE2/2352", "CDI/2336", "CDI/2352"}
)
TRACK_FLAGS = frozenset({"DCP", "4CH", "PRE", "SCMS", "DATA"})

CDTEXT_MAX_LENGTH = 80

_NUMBER_PATTERN = re.compile(r"^\d+$")
_CATALOG_PATTERN = re.compile(r"^\d{12,13}$")
_ISRC_PATTERN = re.compile(r"^[A-Za-z0-9]{5}\d{7}$")
# Only CR, LF and CRLF end a line; other Unicode breaks stay inside values
_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


@dataclass
class _ParseContext:
    """State of a single parse call."""

    sheet: CueSheet
    current_file: FileData | None = None
    current_track: TrackData | None = None


class CueParser:
    """Single-pass parser turning CUE text into a CueSheet plus diagnostics.

    The parser keeps no state between calls, so one instance may be shared
    by several threads as long as each works on its own input.
    """

    def __init__(self, config: ParserConfig | None = None, logger: logging.Logger | None = None) -> None:
        """Initialize the CUE parser.

        Args:
            config: Optional parser configuration, defaults apply if None
            logger: Optional logger instance for debug output
        """
        self.config = config or ParserConfig()
        self.logger = logger or logging.getLogger(__name__)

    def parse_file(self, file_path: str | Path, encoding: str | None = None) -> CueSheet:
        """Parse a CUE file from disk.

        Args:
            file_path: Path to the CUE file
            encoding: Optional encoding override, auto-detected if None

        Returns:
            Parsed CueSheet object

        Raises:
            CueParsingError: If the file is missing, too large, or cannot be read or decoded
        """
        path = Path(file_path)
        if not path.is_file():
            raise CueParsingError(f"CUE file not found: {file_path}")

        try:
            file_size = path.stat().st_size
            if file_size > self.config.max_file_size_bytes:
                self.logger.warning(f"CUE file rejected - too large: {file_size} bytes")
                raise CueParsingError(
                    f"CUE file too large: {file_size} bytes (max {self.config.max_file_size_bytes} bytes)"
                )

            self.logger.debug(f"Parsing CUE file: {file_path} ({file_size} bytes)")
            raw_data = path.read_bytes()
        except OSError as e:
            raise CueParsingError(f"Failed to read file: {e}") from e

        if encoding is None:
            encoding = self._detect_encoding(raw_data)

        try:
            content = raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise CueParsingError(f"Encoding error: {e}") from e

        return self.parse(content)

    def parse_stream(self, stream: TextIO) -> CueSheet:
        """Parse CUE content from an open text stream.

        Raises:
            CueParsingError: If reading from the stream fails
        """
        try:
            return self.parse_lines(stream)
        except (OSError, UnicodeDecodeError) as e:
            raise CueParsingError(f"Failed to read CUE stream: {e}") from e

    def parse(self, content: str) -> CueSheet:
        """Parse CUE sheet content.

        Args:
            content: CUE sheet content as string

        Returns:
            Parsed CueSheet object
        """
        return self.parse_lines(_LINE_BREAK_PATTERN.split(content.removeprefix("\ufeff")))

    def parse_lines(self, lines: Iterable[str]) -> CueSheet:
        """Parse a sequence of CUE lines, one at a time.

        Line terminators left on the lines are ignored.

        Returns:
            Parsed CueSheet with its diagnostics attached
        """
        context = _ParseContext(sheet=CueSheet())

        for line_number, raw_line in enumerate(lines, 1):
            line = LineOfInput(line_number, raw_line.rstrip("\r\n"), context.sheet)
            self._parse_line(context, line)

        sheet = context.sheet
        self.logger.info(
            f"Parsed CUE sheet: {sheet.get_track_count()} tracks, "
            f"{len(sheet.warnings)} warnings, {len(sheet.errors)} errors"
        )
        return sheet

    def _detect_encoding(self, raw_data: bytes) -> str:
        if not self.config.detect_encoding:
            return self.config.default_encoding

        detected = chardet.detect(raw_data)
        encoding = detected["encoding"] or self.config.default_encoding
        self.logger.debug(f"Detected CUE encoding {encoding} (confidence {detected['confidence']})")
        return encoding

    def _parse_line(self, context: _ParseContext, line: LineOfInput) -> None:
        """Parse a single line of CUE content."""
        if not line.input.strip():
            return

        tokens, unterminated = self._tokenize(line.input)
        command = tokens[0].upper()

        if command not in COMMANDS:
            context.sheet.add_warning(line, f"Unsupported command: {tokens[0]}")
            return

        if unterminated:
            context.sheet.add_warning(line, "Unterminated quote, using remainder of line as value")

        handler = getattr(self, f"_handle_{command.lower()}")
        handler(context, line, tokens[1:])

    @staticmethod
    def _tokenize(text: str) -> tuple[list[str], bool]:
        """Split a line into whitespace separated tokens.

        Double quoted segments stay within a single token. An unterminated
        quote extends to the end of the line.

        Returns:
            Tuple of the tokens and whether a quote was left open
        """
        tokens = []
        current: list[str] = []
        in_token = False
        in_quotes = False

        for char in text:
            if in_quotes:
                if char == '"':
                    in_quotes = False
                else:
                    current.append(char)
            elif char == '"':
                in_quotes = True
                in_token = True
            elif char.isspace():
                if in_token:
                    tokens.append("".join(current))
                    current = []
                    in_token = False
            else:
                current.append(char)
                in_token = True

        if in_token:
            tokens.append("".join(current))

        return tokens, in_quotes

    def _expect_arguments(
        self, context: _ParseContext, line: LineOfInput, args: list[str], count: int, usage: str
    ) -> None:
        """Warn unless exactly ``count`` arguments were given."""
        if len(args) != count:
            context.sheet.add_warning(line, f"Invalid number of arguments, expected: {usage}")

    def _require_track(self, context: _ParseContext, line: LineOfInput, command: str) -> TrackData | None:
        if context.current_track is None:
            context.sheet.add_warning(line, f"{command} without preceding TRACK, line ignored")
        return context.current_track

    def _parse_number(self, context: _ParseContext, line: LineOfInput, token: str, command: str) -> int:
        if _NUMBER_PATTERN.match(token):
            return int(token)
        context.sheet.add_warning(line, f"Invalid {command} number: {token}")
        return UNSET_NUMBER

    def _parse_position(self, context: _ParseContext, line: LineOfInput, token: str, command: str) -> Position | None:
        try:
            return Position.from_string(token)
        except InvalidTimeFormatError:
            context.sheet.add_warning(line, f"Invalid {command} position: {token} (expected mm:ss:ff)")
            return None

    @staticmethod
    def _position_or_none(token: str) -> Position | None:
        try:
            return Position.from_string(token)
        except InvalidTimeFormatError:
            return None

    def _text_value(self, context: _ParseContext, line: LineOfInput, args: list[str], usage: str) -> str | None:
        """Extract a single text argument, joining unquoted words."""
        self._expect_arguments(context, line, args, 1, usage)
        if not args:
            return None
        return " ".join(args)

    def _check_cdtext_length(self, context: _ParseContext, line: LineOfInput, command: str, value: str) -> None:
        if len(value) > CDTEXT_MAX_LENGTH:
            context.sheet.add_warning(line, f"{command} exceeds {CDTEXT_MAX_LENGTH} character limit")

    def _handle_rem(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle REM command. Unknown sub-commands are plain comments."""
        if not args:
            return

        sub_command = args[0].upper()
        attribute = REM_FIELDS.get(sub_command)
        if attribute is None:
            return

        if len(args) < 2:
            context.sheet.add_warning(line, f"Invalid number of arguments, expected: REM {sub_command} <value>")
            return

        setattr(context.sheet, attribute, " ".join(args[1:]))

    def _handle_catalog(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle CATALOG command."""
        catalog = self._text_value(context, line, args, "CATALOG <13 digits>")
        if catalog is None:
            return

        if not _CATALOG_PATTERN.match(catalog):
            context.sheet.add_warning(line, f"Invalid CATALOG format: {catalog} (expected 12 or 13 digits)")

        context.sheet.catalog = catalog

    def _handle_cdtextfile(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle CDTEXTFILE command."""
        cdtextfile = self._text_value(context, line, args, "CDTEXTFILE <file>")
        if cdtextfile is not None:
            context.sheet.cdtextfile = cdtextfile

    def _set_cdtext_field(self, context: _ParseContext, line: LineOfInput, args: list[str], command: str) -> None:
        """Set PERFORMER, TITLE or SONGWRITER on the current track, or the sheet outside a track."""
        value = self._text_value(context, line, args, f"{command} <text>")
        if value is None:
            return

        self._check_cdtext_length(context, line, command, value)
        target = context.current_track if context.current_track is not None else context.sheet
        setattr(target, command.lower(), value)

    def _handle_performer(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        self._set_cdtext_field(context, line, args, "PERFORMER")

    def _handle_title(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        self._set_cdtext_field(context, line, args, "TITLE")

    def _handle_songwriter(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        self._set_cdtext_field(context, line, args, "SONGWRITER")

    def _handle_file(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle FILE command. Always starts a new file context."""
        self._expect_arguments(context, line, args, 2, "FILE <file> <type>")

        if len(args) > 2:
            # Unquoted file name containing whitespace
            file_name, file_type = " ".join(args[:-1]), args[-1]
        else:
            file_name = args[0] if args else None
            file_type = args[1] if len(args) > 1 else None

        if file_type is not None and file_type.upper() not in FILE_TYPES:
            context.sheet.add_warning(line, f"Unknown FILE type: {file_type}")

        context.current_file = context.sheet.add_file(FileData(file=file_name, file_type=file_type))
        context.current_track = None

    def _handle_track(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle TRACK command. Always creates a track, even outside a file."""
        self._expect_arguments(context, line, args, 2, "TRACK <number> <type>")

        number = self._parse_number(context, line, args[0], "TRACK") if args else UNSET_NUMBER
        data_type = args[1] if len(args) > 1 else None

        if data_type is not None and data_type.upper() not in TRACK_DATA_TYPES:
            context.sheet.add_warning(line, f"Unknown TRACK data type: {data_type}")

        if context.current_file is None:
            context.sheet.add_warning(line, "TRACK without preceding FILE, adding track to an unnamed file")
            context.current_file = context.sheet.add_file(FileData())

        context.current_track = context.current_file.add_track(TrackData(number=number, data_type=data_type))

    def _handle_index(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle INDEX command."""
        track = self._require_track(context, line, "INDEX")
        if track is None:
            return

        self._expect_arguments(context, line, args, 2, "INDEX <number> <mm:ss:ff>")
        if len(args) == 1 and (position := self._position_or_none(args[0])) is not None:
            # INDEX without number, as written for indices whose number is unset
            number = UNSET_NUMBER
        else:
            number = self._parse_number(context, line, args[0], "INDEX") if args else UNSET_NUMBER
            position = self._parse_position(context, line, args[1], "INDEX") if len(args) > 1 else None

        track.add_index(Index(number=number, position=position))

    def _handle_isrc(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle ISRC command."""
        track = self._require_track(context, line, "ISRC")
        if track is None:
            return

        isrc = self._text_value(context, line, args, "ISRC <code>")
        if isrc is None:
            return

        if not _ISRC_PATTERN.match(isrc):
            context.sheet.add_warning(line, f"Invalid ISRC format: {isrc} (expected CCOOOYYSSSSS)")

        track.isrc_code = isrc

    def _handle_pregap(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle PREGAP command."""
        track = self._require_track(context, line, "PREGAP")
        if track is None:
            return

        self._expect_arguments(context, line, args, 1, "PREGAP <mm:ss:ff>")
        if args and (position := self._parse_position(context, line, args[0], "PREGAP")) is not None:
            track.pregap = position

    def _handle_postgap(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle POSTGAP command."""
        track = self._require_track(context, line, "POSTGAP")
        if track is None:
            return

        self._expect_arguments(context, line, args, 1, "POSTGAP <mm:ss:ff>")
        if args and (position := self._parse_position(context, line, args[0], "POSTGAP")) is not None:
            track.postgap = position

    def _handle_flags(self, context: _ParseContext, line: LineOfInput, args: list[str]) -> None:
        """Handle FLAGS command. Unknown flags are kept as given."""
        track = self._require_track(context, line, "FLAGS")
        if track is None:
            return

        for flag in args:
            if flag.upper() not in TRACK_FLAGS:
                context.sheet.add_warning(line, f"Unknown flag: {flag}")

        track.flags.update(args)
