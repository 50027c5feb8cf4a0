"""
Unit tests for domain <-> DTO mappers.
"""

from domain.models import MusicRegion, SpeechBoundary, TranscriptSegment
from mappers import (
    boundary_to_dto, dtos_to_music_regions, report_to_measurement,
    response_to_result, segments_to_dtos,
)
from models import LoudnormReport, TimeRangeModel, WhisperVerboseResponse


class TestMappers:
    """Tests for mapper functions."""

    def test_segments_to_dtos_numbers_in_order(self):
        segments = [
            TranscriptSegment(start=0.0, end=2.0, text="a", no_speech_prob=0.1),
            TranscriptSegment(start=2.0, end=4.0, text="b"),
        ]

        dtos = segments_to_dtos(segments)

        assert [d.id for d in dtos] == [0, 1]
        assert dtos[0].no_speech_prob == 0.1
        assert dtos[1].avg_logprob is None

    def test_response_to_result_plain_json_drops_segments(self):
        response = WhisperVerboseResponse.model_validate({
            "text": "hi",
            "segments": [{"start": 0, "end": 1, "text": "hi"}],
        })

        verbose = response_to_result("open", response)
        plain = response_to_result("open", response, verbose=False)

        assert len(verbose.segments) == 1
        assert plain.segments == []
        assert plain.text == "hi"

    def test_report_to_measurement(self):
        report = LoudnormReport.model_validate({
            "input_i": "-20.1", "input_tp": "-3.0", "input_lra": "4.0",
            "input_thresh": "-30.5", "target_offset": "-0.3",
            "output_i": "-16.0",
        })

        measured = report_to_measurement(report)

        assert measured.input_i == -20.1
        assert measured.target_offset == -0.3

    def test_boundary_to_dto(self):
        dto = boundary_to_dto(SpeechBoundary(0.0, 10.0, 10.0, fallback=True))

        assert dto.model_dump() == {
            "speech_start": 0.0, "speech_end": 10.0,
            "total_duration": 10.0, "fallback": True,
        }

    def test_dtos_to_music_regions(self):
        regions = dtos_to_music_regions([TimeRangeModel(start=40, end=50)])

        assert regions == [MusicRegion(start=40.0, end=50.0)]
        assert dtos_to_music_regions(None) == []
