"""Domain <-> DTO mappers.

Converts between the dataclasses in domain.models and the Pydantic DTOs in
models.py so the heuristics never depend on wire shapes.
"""

from typing import Optional

from domain.models import (
    LoudnessMeasurement, MusicRegion, SpeechBoundary, TimeRange,
    TranscriptionResult, TranscriptSegment,
)
from models import (
    LoudnormReport, SpeechBoundaryResponse, TimeRangeModel,
    WhisperSegment, WhisperVerboseResponse,
)


def segment_to_dto(seg: TranscriptSegment, index: int = 0) -> WhisperSegment:
    """Convert a domain TranscriptSegment to a WhisperSegment DTO."""
    return WhisperSegment(
        id=index,
        start=seg.start,
        end=seg.end,
        text=seg.text,
        no_speech_prob=seg.no_speech_prob,
        compression_ratio=seg.compression_ratio,
        avg_logprob=seg.avg_logprob,
    )


def dto_to_segment(dto: WhisperSegment) -> TranscriptSegment:
    """Convert a WhisperSegment DTO to a domain TranscriptSegment."""
    return TranscriptSegment(
        start=dto.start,
        end=dto.end,
        text=dto.text,
        no_speech_prob=dto.no_speech_prob,
        compression_ratio=dto.compression_ratio,
        avg_logprob=dto.avg_logprob,
    )


def segments_to_dtos(segments: list[TranscriptSegment]) -> list[WhisperSegment]:
    """Convert a list of domain segments to DTOs, preserving order."""
    return [segment_to_dto(seg, i) for i, seg in enumerate(segments)]


def dtos_to_segments(dtos: list[WhisperSegment]) -> list[TranscriptSegment]:
    """Convert a list of DTOs to domain segments."""
    return [dto_to_segment(dto) for dto in dtos]


def response_to_result(
    engine: str, response: WhisperVerboseResponse, verbose: bool = True
) -> TranscriptionResult:
    """Build a TranscriptionResult; plain json responses carry no segments."""
    segments = dtos_to_segments(response.segments) if verbose else []
    return TranscriptionResult(
        engine=engine,
        text=response.text,
        segments=segments,
        duration=response.duration,
    )


def report_to_measurement(report: LoudnormReport) -> LoudnessMeasurement:
    return LoudnessMeasurement(
        input_i=report.input_i,
        input_tp=report.input_tp,
        input_lra=report.input_lra,
        input_thresh=report.input_thresh,
        target_offset=report.target_offset,
    )


def boundary_to_dto(boundary: SpeechBoundary) -> SpeechBoundaryResponse:
    return SpeechBoundaryResponse(
        speech_start=boundary.speech_start,
        speech_end=boundary.speech_end,
        total_duration=boundary.total_duration,
        fallback=boundary.fallback,
    )


def range_to_dto(time_range: TimeRange) -> TimeRangeModel:
    return TimeRangeModel(start=time_range.start, end=time_range.end)


def dtos_to_music_regions(dtos: Optional[list[TimeRangeModel]]) -> list[MusicRegion]:
    return [MusicRegion(start=r.start, end=r.end) for r in dtos or []]
