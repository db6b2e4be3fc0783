"""CUE sheet handler module for tolerant parsing and canonical serialization."""

__version__ = "1.0.0"

# Exception exports
from .exceptions import CueError, CueParsingError, CueSerializationError, InvalidTimeFormatError

# Diagnostic exports
from .messages import CueMessage, LineOfInput, Severity

# Model exports
from .models import CueSheet, FileData, Index, Position, TrackData

# Parser exports
from .parser import CueParser

# Serializer exports
from .serializer import CueSheetSerializer, format_position, quote_if_necessary

__all__ = [
    # Exceptions
    "CueError",
    # Diagnostics
    "CueMessage",
    # Parser
    "CueParser",
    # Exceptions
    "CueParsingError",
    # Exceptions
    "CueSerializationError",
    # Models
    "CueSheet",
    # Serializer
    "CueSheetSerializer",
    # Models
    "FileData",
    # Models
    "Index",
    # Exceptions
    "InvalidTimeFormatError",
    # Diagnostics
    "LineOfInput",
    # Models
    "Position",
    # Diagnostics
    "Severity",
    # Models
    "TrackData",
    # Serializer
    "format_position",
    # Serializer
    "quote_if_necessary",
]
