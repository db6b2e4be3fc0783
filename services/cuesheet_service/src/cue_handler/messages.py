"""Diagnostic messages collected while parsing a CUE sheet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CueSheet


class Severity(Enum):
    """Diagnostic severity levels."""

    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class LineOfInput:
    """A single line of CUE input together with its origin.

    Attributes:
        line_number: 1-based number of the line in the source
        input: Raw text of the line, exactly as read
        associated_sheet: Sheet under construction when the line was read
    """

    line_number: int
    input: str
    associated_sheet: CueSheet | None = None


@dataclass(frozen=True)
class CueMessage:
    """A warning or error tied to one line of CUE input."""

    severity: Severity
    line_number: int
    input: str
    message: str

    @classmethod
    def from_line(cls, severity: Severity, line: LineOfInput, message: str) -> CueMessage:
        """Create a message for the given input line."""
        return cls(severity=severity, line_number=line.line_number, input=line.input, message=message)

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, str | int]:
        """Convert message to dictionary for serialization."""
        return {
            "severity": self.severity.value,
            "line_number": self.line_number,
            "input": self.input,
            "message": self.message,
        }

    def __str__(self) -> str:
        """Human readable form, e.g. ``Warning [Line 3]: Unsupported command | Input: FOO``."""
        return f"{self.severity.value.capitalize()} [Line {self.line_number}]: {self.message} | Input: {self.input}"
