"""Data models for CUE sheet representation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidTimeFormatError
from .messages import CueMessage, LineOfInput, Severity

logger = logging.getLogger(__name__)

FRAMES_PER_SECOND = 75
SECONDS_PER_MINUTE = 60

# Unset marker for track and index numbers
UNSET_NUMBER = -1


@dataclass(frozen=True)
class Position:
    """A disc timecode in MM:SS:FF form (75 frames per second).

    Ranges are not enforced: seconds above 59 or frames above 74 are kept
    as given so that non-conforming sheets survive a round trip.
    """

    _PATTERN = re.compile(r"^(\d{2}):(\d{2}):(\d{2})$")

    minutes: int = 0
    seconds: int = 0
    frames: int = 0

    @classmethod
    def from_string(cls, time_str: str) -> Position:
        """Parse a position from MM:SS:FF format.

        Args:
            time_str: Time string with exactly two digits per field

        Returns:
            Position instance

        Raises:
            InvalidTimeFormatError: If the string does not match MM:SS:FF
        """
        match = cls._PATTERN.match(time_str)
        if not match:
            raise InvalidTimeFormatError(f"Invalid time format: {time_str} (expected mm:ss:ff)")

        return cls(minutes=int(match.group(1)), seconds=int(match.group(2)), frames=int(match.group(3)))

    @classmethod
    def from_frames(cls, total_frames: int) -> Position:
        """Create a normalized Position from a total frame count."""
        frames_per_minute = FRAMES_PER_SECOND * SECONDS_PER_MINUTE
        minutes, remaining = divmod(total_frames, frames_per_minute)
        seconds, frames = divmod(remaining, FRAMES_PER_SECOND)
        return cls(minutes=minutes, seconds=seconds, frames=frames)

    def to_frames(self) -> int:
        """Convert to total frames."""
        return (self.minutes * SECONDS_PER_MINUTE + self.seconds) * FRAMES_PER_SECOND + self.frames

    def to_milliseconds(self) -> int:
        """Convert to milliseconds, rounding down."""
        return (self.to_frames() * 1000) // FRAMES_PER_SECOND

    def __str__(self) -> str:
        """String representation in MM:SS:FF format."""
        return f"{self.minutes:02d}:{self.seconds:02d}:{self.frames:02d}"


@dataclass
class Index:
    """An INDEX entry of a track."""

    number: int = UNSET_NUMBER
    position: Position | None = None
    parent: TrackData | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "position": str(self.position) if self.position else None,
        }


@dataclass
class TrackData:
    """Represents a single TRACK of a FILE."""

    number: int = UNSET_NUMBER
    data_type: str | None = None
    isrc_code: str | None = None
    performer: str | None = None
    title: str | None = None
    songwriter: str | None = None
    pregap: Position | None = None
    postgap: Position | None = None
    flags: set[str] = field(default_factory=set)
    indices: list[Index] = field(default_factory=list)
    parent: FileData | None = field(default=None, compare=False, repr=False)

    def add_index(self, index: Index) -> Index:
        """Append an index to this track and take ownership of it."""
        index.parent = self
        self.indices.append(index)
        return index

    def get_index(self, number: int) -> Index | None:
        """Get the first index with the given number.

        Returns:
            The matching Index, or None if the track has none
        """
        for index in self.indices:
            if index.number == number:
                return index
        return None

    @property
    def start_position(self) -> Position | None:
        """Position of INDEX 01, where audible content starts."""
        index = self.get_index(1)
        return index.position if index else None

    def to_dict(self) -> dict[str, Any]:
        """Convert track to dictionary for serialization.

        Returns:
            Dictionary representation of track
        """
        return {
            "number": self.number,
            "type": self.data_type,
            "isrc": self.isrc_code,
            "performer": self.performer,
            "title": self.title,
            "songwriter": self.songwriter,
            "pregap": str(self.pregap) if self.pregap else None,
            "postgap": str(self.postgap) if self.postgap else None,
            "flags": sorted(self.flags),
            "indices": [index.to_dict() for index in self.indices],
        }


@dataclass
class FileData:
    """Represents a FILE entry in a CUE sheet."""

    file: str | None = None
    file_type: str | None = None
    tracks: list[TrackData] = field(default_factory=list)
    parent: CueSheet | None = field(default=None, compare=False, repr=False)

    def add_track(self, track: TrackData) -> TrackData:
        """Append a track to this file and take ownership of it."""
        track.parent = self
        self.tracks.append(track)
        return track

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "type": self.file_type,
            "tracks": [track.to_dict() for track in self.tracks],
        }


@dataclass
class CueSheet:
    """Represents a complete CUE sheet and the diagnostics gathered while reading it."""

    # Disc-level metadata
    genre: str | None = None
    year: str | None = None
    discid: str | None = None
    comment: str | None = None
    catalog: str | None = None
    performer: str | None = None
    title: str | None = None
    songwriter: str | None = None
    cdtextfile: str | None = None

    # Files and tracks
    files: list[FileData] = field(default_factory=list)

    # Parsing information
    _messages: list[CueMessage] = field(default_factory=list, init=False, compare=False, repr=False)

    def add_file(self, file_data: FileData) -> FileData:
        """Append a file to this sheet and take ownership of it."""
        file_data.parent = self
        self.files.append(file_data)
        return file_data

    def add_warning(self, line: LineOfInput, message: str) -> CueMessage:
        """Record a warning for the given input line."""
        return self._add_message(Severity.WARNING, line, message)

    def add_error(self, line: LineOfInput, message: str) -> CueMessage:
        """Record an error for the given input line."""
        return self._add_message(Severity.ERROR, line, message)

    def _add_message(self, severity: Severity, line: LineOfInput, message: str) -> CueMessage:
        cue_message = CueMessage.from_line(severity, line, message)
        self._messages.append(cue_message)
        logger.debug(str(cue_message))
        return cue_message

    @property
    def messages(self) -> tuple[CueMessage, ...]:
        """All diagnostics in the order they were detected."""
        return tuple(self._messages)

    @property
    def warnings(self) -> list[CueMessage]:
        return [message for message in self._messages if message.is_warning]

    @property
    def errors(self) -> list[CueMessage]:
        return [message for message in self._messages if message.is_error]

    def get_all_tracks(self) -> list[TrackData]:
        """Get all tracks from all files.

        Returns:
            List of all tracks in order
        """
        tracks = []
        for file_data in self.files:
            tracks.extend(file_data.tracks)
        return tracks

    def get_track_count(self) -> int:
        """Get total number of tracks."""
        return len(self.get_all_tracks())

    def to_dict(self) -> dict[str, Any]:
        """Convert CUE sheet to dictionary for serialization.

        Returns:
            Dictionary representation, diagnostics included
        """
        return {
            "genre": self.genre,
            "year": self.year,
            "discid": self.discid,
            "comment": self.comment,
            "catalog": self.catalog,
            "performer": self.performer,
            "title": self.title,
            "songwriter": self.songwriter,
            "cdtextfile": self.cdtextfile,
            "files": [file_data.to_dict() for file_data in self.files],
            "messages": [message.to_dict() for message in self._messages],
        }
