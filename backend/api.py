"""FastAPI surface for the episode audio engine.

Endpoints take local file paths: the service runs next to the pipeline that
downloads sources and synthesizes segments, and shares its filesystem.
"""

import logging
import os
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import (
    Config, create_audio_adapter, create_progress_adapter,
    create_transcription_adapters, get_config,
)
from domain.errors import (
    AudioEngineError, EngineNotFoundError, OutputParseError, ProbeError,
    TranscriptionError,
)
from mappers import (
    boundary_to_dto, dtos_to_music_regions, dtos_to_segments, range_to_dto,
    segments_to_dtos,
)
from models import (
    AssembleRequest, AssembleResponse, AudioPathRequest, LanguageEpisodeBody,
    LanguageEpisodeResponse, MusicRegionRequest, SpeechBoundaryResponse,
    TimeRangeModel, TranscriptFilterRequest, TranscriptFilterResponse,
)
from ports.audio import AudioProcessingPort
from post_processing import filter_transcript, has_confidence_metadata, join_text
from use_cases.assemble import AssembleEpisodeUseCase
from use_cases.boundaries import MusicRegionDetector, SpeechBoundaryEstimator
from use_cases.language_episode import LanguageEpisodeRequest, LanguageEpisodeUseCase
from use_cases.transcribe import MultiEngineTranscriber

logger = logging.getLogger(__name__)

_ERROR_STATUS = [
    (ProbeError, 422),
    (OutputParseError, 422),
    (EngineNotFoundError, 503),
    (TranscriptionError, 502),
]


def _status_for(error: AudioEngineError) -> int:
    for error_cls, status in _ERROR_STATUS:
        if isinstance(error, error_cls):
            return status
    return 500


def create_app(
    cfg: Optional[Config] = None,
    audio_factory: Optional[Callable[[], AudioProcessingPort]] = None,
    transcriber_factory: Optional[Callable[[], MultiEngineTranscriber]] = None,
) -> FastAPI:
    """Build the app. Factories run per request so every request gets a fresh
    duration cache; tests inject fakes through them."""
    cfg = cfg or get_config()
    audio_factory = audio_factory or (lambda: create_audio_adapter(cfg))
    transcriber_factory = transcriber_factory or (
        lambda: MultiEngineTranscriber(
            create_transcription_adapters(cfg), language=cfg.transcription_language
        )
    )
    tuning = cfg.audio_tuning()

    app = FastAPI(title="Podgen Audio Engine")

    @app.exception_handler(AudioEngineError)
    async def audio_engine_error_handler(request: Request, exc: AudioEngineError):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(
            status_code=_status_for(exc),
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "config": cfg.as_dict()}

    @app.post("/v1/audio/boundaries", response_model=SpeechBoundaryResponse)
    def speech_boundaries(body: AudioPathRequest):
        _require_file(body.path)
        estimator = SpeechBoundaryEstimator(audio_factory(), tuning)
        return boundary_to_dto(estimator.estimate(body.path))

    @app.post("/v1/audio/music-regions", response_model=list[TimeRangeModel])
    def music_regions(body: MusicRegionRequest):
        _require_file(body.path)
        detector = MusicRegionDetector(audio_factory(), tuning)
        regions = detector.detect(
            body.path, min_duration=body.min_duration, merge_gap=body.merge_gap
        )
        return [range_to_dto(r) for r in regions]

    @app.post("/v1/audio/assemble", response_model=AssembleResponse)
    def assemble(body: AssembleRequest):
        for path in body.segment_paths:
            _require_file(path)
        audio = audio_factory()
        use_case = AssembleEpisodeUseCase(audio, cfg.loudness_target(), tuning)
        output_path = use_case.execute(
            body.segment_paths, body.output_path,
            intro_path=body.intro_path, outro_path=body.outro_path,
        )
        if output_path is None:
            return AssembleResponse()
        return AssembleResponse(
            output_path=output_path, duration=audio.probe_duration(output_path)
        )

    @app.post("/v1/transcripts/filter", response_model=TranscriptFilterResponse)
    def filter_segments(body: TranscriptFilterRequest):
        segments = dtos_to_segments(body.segments)
        if has_confidence_metadata(segments):
            kept = filter_transcript(segments, dtos_to_music_regions(body.music_regions))
        else:
            kept = segments
        return TranscriptFilterResponse(
            text=join_text(kept),
            segments=segments_to_dtos(kept),
            dropped=len(segments) - len(kept),
        )

    @app.post("/v1/episodes/language", response_model=LanguageEpisodeResponse)
    def language_episode(body: LanguageEpisodeBody):
        _require_file(body.source_audio_path)
        transcriber = transcriber_factory()
        if body.language:
            transcriber = MultiEngineTranscriber(transcriber.engines, language=body.language)
        audio = audio_factory()
        use_case = LanguageEpisodeUseCase(
            audio,
            transcriber,
            create_progress_adapter(),
            assembler=AssembleEpisodeUseCase(audio, cfg.loudness_target(), tuning),
            tuning=tuning,
            temp_dir=cfg.temp_dir,
        )
        result = use_case.execute(LanguageEpisodeRequest(
            source_audio_path=body.source_audio_path,
            output_path=body.output_path,
            intro_path=body.intro_path,
            outro_path=body.outro_path,
            title=body.title,
            description=body.description,
        ))
        return LanguageEpisodeResponse(
            output_path=result.output_path,
            transcript_path=result.transcript_path,
            transcript=result.transcript,
            speech_boundary=boundary_to_dto(result.speech_boundary),
            engine_errors=result.engine_errors,
        )

    if os.path.isdir(cfg.output_dir):
        app.mount("/episodes", StaticFiles(directory=cfg.output_dir), name="episodes")

    return app


def _require_file(path: str) -> None:
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail=f"Audio file not found: {path}")
