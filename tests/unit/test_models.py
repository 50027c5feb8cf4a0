"""
Unit tests for domain value objects and wire DTOs.
"""

import pytest
from pydantic import ValidationError

from domain.errors import AssemblyError, AudioEngineError, AudioProcessingError
from domain.models import (
    SilenceEvent, TimeRange, TranscriptionResult, TranscriptSegment,
)
from models import MusicRegionRequest, WhisperVerboseResponse


class TestTimeRange:
    """Tests for TimeRange and its subclasses."""

    def test_duration_and_contains(self):
        r = TimeRange(40.0, 50.0)

        assert r.duration == 10.0
        assert r.contains(40.0)
        assert r.contains(49.99)
        assert not r.contains(50.0)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            SilenceEvent(start=5.0, end=4.0)

    def test_zero_length_allowed(self):
        assert SilenceEvent(start=5.0, end=5.0).duration == 0.0


class TestTranscriptionResult:
    def test_speech_span_from_segments(self):
        result = TranscriptionResult(
            engine="open", text="a b",
            segments=[TranscriptSegment(1.2, 3.0, "a"), TranscriptSegment(3.0, 7.5, "b")],
        )

        assert (result.speech_start, result.speech_end) == (1.2, 7.5)

    def test_speech_span_without_segments(self):
        result = TranscriptionResult(engine="open", text="a", duration=30.0)

        assert (result.speech_start, result.speech_end) == (0.0, 30.0)


class TestErrors:
    def test_assembly_error_hierarchy(self):
        error = AssemblyError("concatenate", 1, "Invalid argument")

        assert isinstance(error, AudioProcessingError)
        assert isinstance(error, AudioEngineError)
        assert str(error) == "ffmpeg concatenate failed (exit 1): Invalid argument"


class TestDTOs:
    def test_plain_json_response(self):
        response = WhisperVerboseResponse.model_validate({"text": "Hola."})

        assert response.segments == []
        assert response.duration is None

    def test_music_region_request_bounds(self):
        with pytest.raises(ValidationError):
            MusicRegionRequest(path="a.mp3", merge_gap=-1)

        assert MusicRegionRequest(path="a.mp3", merge_gap=0).merge_gap == 0
