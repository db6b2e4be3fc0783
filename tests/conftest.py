"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from services.cuesheet_service.src.config import reset_config


SAMPLE_CUE = """REM GENRE Electronic
REM DATE 2023
REM DISCID 8E0B710B
REM COMMENT "Mixed live"
CATALOG 1234567890123
PERFORMER "Various Artists"
TITLE "Complex Album"
FILE "disc one.wav" WAVE
  TRACK 01 AUDIO
    TITLE "Opening"
    PERFORMER "Artist 1"
    SONGWRITER "Writer 1"
    ISRC GBUM71029078
    FLAGS DCP PRE
    INDEX 01 00:00:00
  TRACK 02 AUDIO
    TITLE "Second"
    PREGAP 00:02:00
    INDEX 00 04:10:00
    INDEX 01 04:12:00
FILE disc2.wav WAVE
  TRACK 03 AUDIO
    TITLE Closing
    POSTGAP 00:01:00
    INDEX 01 00:00:00
"""


@pytest.fixture
def sample_cue_content() -> str:
    """Well formed CUE sheet using every supported command."""
    return SAMPLE_CUE


@pytest.fixture
def sample_cue_file(tmp_path: Path) -> Path:
    """SAMPLE_CUE written to a temporary file."""
    path = tmp_path / "sample.cue"
    path.write_text(SAMPLE_CUE, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from CUESHEET_* environment variables and cached configuration."""
    for name in ("CUESHEET_LOG_LEVEL", "CUESHEET_LOG_JSON", "CUESHEET_SERIALIZER_INDENTATION"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
