"""Framework-agnostic domain models for the episode audio engine.

Everything here is a value object produced and consumed within one pipeline
run. Wire formats (ffmpeg JSON, transcription API responses) are validated by
the Pydantic DTOs in models.py and mapped onto these at the boundary.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TimeRange:
    """A span on one audio file's timeline, in seconds."""
    start: float
    end: float

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"TimeRange end ({self.end}) precedes start ({self.start})")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end


@dataclass(frozen=True)
class SilenceEvent(TimeRange):
    """A gap below the noise floor, as reported by silencedetect."""
    reported_duration: Optional[float] = None


@dataclass(frozen=True)
class MusicRegion(TimeRange):
    """Merged silence gaps on the band-limited signal, judged to be music."""


@dataclass(frozen=True)
class SpeechBoundary:
    speech_start: float
    speech_end: float
    total_duration: float
    fallback: bool = False

    @property
    def duration(self) -> float:
        return self.speech_end - self.speech_start

    def as_tuple(self) -> tuple[float, float]:
        return (self.speech_start, self.speech_end)


@dataclass
class TranscriptSegment:
    """A transcribed segment with the engine's own confidence signals.

    Engines that return plain text only produce no segments at all; engines
    that return segments without metrics leave the metric fields as None.
    """
    start: float
    end: float
    text: str
    no_speech_prob: Optional[float] = None
    compression_ratio: Optional[float] = None
    avg_logprob: Optional[float] = None

    @property
    def has_confidence_metadata(self) -> bool:
        return (
            self.no_speech_prob is not None
            and self.compression_ratio is not None
            and self.avg_logprob is not None
        )


@dataclass
class TranscriptionResult:
    """Output of one transcription engine for one audio file."""
    engine: str
    text: str
    segments: list[TranscriptSegment] = field(default_factory=list)
    duration: Optional[float] = None

    @property
    def speech_start(self) -> float:
        return self.segments[0].start if self.segments else 0.0

    @property
    def speech_end(self) -> float:
        if self.segments:
            return self.segments[-1].end
        return self.duration or 0.0


@dataclass
class ComparisonResult:
    """Fan-out transcription: primary result plus every engine's outcome."""
    primary: TranscriptionResult
    results: dict[str, TranscriptionResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LoudnessTarget:
    integrated: float = -16.0
    true_peak: float = -1.5
    lra: float = 11.0


@dataclass(frozen=True)
class LoudnessMeasurement:
    """First-pass loudnorm analysis, fed verbatim into the second pass."""
    input_i: float
    input_tp: float
    input_lra: float
    input_thresh: float
    target_offset: float


@dataclass(frozen=True)
class AudioTuning:
    """Thresholds for every boundary heuristic.

    The defaults were tuned on spoken-word podcasts with instrumental
    intros/outros and are all overridable from the environment (see config.py).
    """
    # Generic silence detection
    silence_noise_db: float = -30.0
    silence_min_gap: float = 0.7

    # Band-limited detection
    bandpass_low_hz: int = 300
    bandpass_high_hz: int = 3000
    bandpass_noise_db: float = -15.0
    bandpass_min_gap: float = 0.5

    # Speech boundary estimation
    intro_scan_limit: float = 120.0
    outro_scan_limit: float = 120.0
    min_music_duration: float = 3.0
    strip_padding: float = 1.5
    min_speech_duration: float = 30.0

    # Music region detection
    music_min_duration: float = 5.0
    music_merge_gap: float = 1.5

    # Tail refinement
    min_outro_music: float = 15.0
    tail_min_savings: float = 10.0
    tail_padding: float = 1.5
    tail_fade_out: float = 2.0

    # Assembly
    intro_fade_out: float = 3.0
    outro_fade_in: float = 2.0

    # Extra lead-in kept before the detected speech start; greetings tend
    # to sit right on the music boundary.
    greeting_padding: float = 3.0
