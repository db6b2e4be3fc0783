"""Unit tests for CUE diagnostic messages."""

import pytest

from services.cuesheet_service.src.cue_handler.messages import CueMessage, LineOfInput, Severity
from services.cuesheet_service.src.cue_handler.models import CueSheet


class TestCueMessage:
    """Test CueMessage class."""

    def test_from_line(self):
        """Messages copy number and raw text from the input line."""
        sheet = CueSheet()
        line = LineOfInput(12, '  FOO "bar"', sheet)

        message = CueMessage.from_line(Severity.ERROR, line, "Something broke")

        assert message.line_number == 12
        assert message.input == '  FOO "bar"'
        assert message.message == "Something broke"
        assert message.is_error
        assert not message.is_warning
        assert line.associated_sheet is sheet

    def test_str(self):
        """Test human readable rendering."""
        message = CueMessage(Severity.WARNING, 3, "FOO", "Unsupported command: FOO")

        assert str(message) == "Warning [Line 3]: Unsupported command: FOO | Input: FOO"

    def test_frozen(self):
        """Messages cannot be altered once recorded."""
        message = CueMessage(Severity.WARNING, 3, "FOO", "Unsupported command: FOO")

        with pytest.raises(AttributeError):
            message.line_number = 4  # type: ignore[misc]
