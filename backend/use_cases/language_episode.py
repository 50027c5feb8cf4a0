"""LanguageEpisodeUseCase — turn a downloaded source episode into a clean one.

Stages, in order: strip intro/outro music, transcribe the trimmed audio,
filter the transcript, assemble the trimmed audio between the podcast's own
intro/outro, and save the transcript next to the episode.
"""

import os
import time
import uuid
import logging
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from domain.models import AudioTuning, SpeechBoundary, TranscriptSegment
from ports.audio import AudioProcessingPort
from ports.progress import ProgressPort
from post_processing import filter_transcript, has_confidence_metadata, join_text
from use_cases.assemble import AssembleEpisodeUseCase
from use_cases.boundaries import (
    MusicRegionDetector, SpeechBoundaryEstimator, TailTrimRefiner,
)
from use_cases.transcribe import MultiEngineTranscriber

logger = logging.getLogger(__name__)


@dataclass
class LanguageEpisodeRequest:
    """All parameters for one language-episode run."""
    source_audio_path: str
    output_path: str
    intro_path: Optional[str] = None
    outro_path: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass
class LanguageEpisodeResult:
    output_path: Optional[str]
    transcript: str
    transcript_path: str
    speech_boundary: SpeechBoundary
    kept_segments: list[TranscriptSegment] = field(default_factory=list)
    engine_errors: dict[str, str] = field(default_factory=dict)


class LanguageEpisodeUseCase:
    def __init__(
        self,
        audio: AudioProcessingPort,
        transcriber: MultiEngineTranscriber,
        progress: ProgressPort,
        assembler: Optional[AssembleEpisodeUseCase] = None,
        tuning: Optional[AudioTuning] = None,
        temp_dir: Optional[str] = None,
    ):
        self._audio = audio
        self._transcriber = transcriber
        self._progress = progress
        self._tuning = tuning or AudioTuning()
        self._assembler = assembler or AssembleEpisodeUseCase(audio, tuning=self._tuning)
        self._estimator = SpeechBoundaryEstimator(audio, self._tuning)
        self._music = MusicRegionDetector(audio, self._tuning)
        self._tail = TailTrimRefiner(audio, self._tuning)
        self._temp_dir = temp_dir

    def execute(self, req: LanguageEpisodeRequest) -> LanguageEpisodeResult:
        run_id = uuid.uuid4().hex[:12]
        temp_files: list[str] = []

        try:
            # 1. Strip intro/outro music
            with self._stage(run_id, "trim_music"):
                boundary = self._estimator.estimate(req.source_audio_path)
                start = max(boundary.speech_start - self._tuning.greeting_padding, 0)

                trimmed_path = self._temp_path("trimmed", temp_files)
                self._audio.extract_segment(
                    req.source_audio_path, trimmed_path, start, boundary.speech_end
                )
                logger.info(f"Trimmed to {start:.1f}s → {boundary.speech_end:.1f}s")

                refined_path = self._temp_path("refined", temp_files)
                trimmed_path = self._tail.refine(trimmed_path, refined_path)

            # 2. Transcribe
            with self._stage(run_id, "transcription"):
                comparison = self._transcriber.execute(trimmed_path)
                primary = comparison.primary

            # 3. Build transcript
            with self._stage(run_id, "build_transcript"):
                if has_confidence_metadata(primary.segments):
                    regions = self._music.detect(trimmed_path)
                    kept = filter_transcript(primary.segments, regions)
                    transcript = join_text(kept)
                else:
                    logger.info("Using transcript text directly (no confidence metadata)")
                    kept = list(primary.segments)
                    transcript = primary.text.strip()

            # 4. Assemble
            with self._stage(run_id, "assembly"):
                output_path = self._assembler.execute(
                    [trimmed_path], req.output_path,
                    intro_path=req.intro_path, outro_path=req.outro_path,
                )

            transcript_path = save_transcript(req, transcript)
            logger.info(f"✓ Episode ready: {output_path}")

            return LanguageEpisodeResult(
                output_path=output_path,
                transcript=transcript,
                transcript_path=transcript_path,
                speech_boundary=boundary,
                kept_segments=kept,
                engine_errors=comparison.errors,
            )
        finally:
            _cleanup(temp_files)

    @contextmanager
    def _stage(self, run_id: str, stage: str):
        self._progress.report(run_id, stage)
        started = time.monotonic()
        yield
        self._progress.stage_finished(run_id, stage, time.monotonic() - started)

    def _temp_path(self, label: str, temp_files: list[str]) -> str:
        temp_file = tempfile.NamedTemporaryFile(
            prefix=f"podgen_{label}_{os.getpid()}_",
            suffix=".mp3",
            dir=self._temp_dir,
            delete=False,
        )
        temp_file.close()
        temp_files.append(temp_file.name)
        return temp_file.name


def transcript_path_for(output_path: str) -> str:
    path = Path(output_path)
    return str(path.with_name(f"{path.stem}_transcript.md"))


def save_transcript(req: LanguageEpisodeRequest, transcript: str) -> str:
    """Write the transcript as markdown beside the episode."""
    path = transcript_path_for(req.output_path)
    Path(path).parent.mkdir(parents=True, exist_ok=True)

    lines = [f"# {req.title or Path(req.output_path).stem}", ""]
    if req.description:
        lines += [req.description, ""]
    lines += ["## Transcript", "", transcript, ""]

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    logger.info(f"Transcript saved to {path}")
    return path


def _cleanup(paths: list[str]) -> None:
    for path in paths:
        try:
            if os.path.exists(path):
                os.unlink(path)
        except OSError as e:
            logger.warning(f"Failed to clean up {path}: {e}")
