"""Exception classes for CUE sheet handling."""


class CueError(Exception):
    """Base exception for all CUE-related errors."""


class CueParsingError(CueError):
    """Raised when a CUE source cannot be read at all."""


class CueSerializationError(CueError):
    """Raised when a serialized CUE sheet cannot be written."""


class InvalidTimeFormatError(CueError):
    """Raised when a time string is not in MM:SS:FF format."""
