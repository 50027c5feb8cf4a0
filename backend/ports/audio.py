"""AudioProcessingPort — abstract interface for the external audio engine."""

from abc import ABC, abstractmethod
from typing import Optional

from domain.models import LoudnessMeasurement, LoudnessTarget, SilenceEvent


class AudioProcessingPort(ABC):
    @abstractmethod
    def probe_duration(self, path: str) -> float:
        """Duration in seconds. Raises ProbeError. Cached per path."""

    @abstractmethod
    def detect_silences(
        self, path: str, noise_db: float, min_gap: float
    ) -> list[SilenceEvent]:
        """Silence gaps in chronological order. Returns [] if detection fails."""

    @abstractmethod
    def bandpass(self, input_path: str, low_hz: int, high_hz: int) -> str:
        """Write a band-limited temporary WAV. Caller deletes it."""

    @abstractmethod
    def extract_segment(
        self, input_path: str, output_path: str, start: float, end: float
    ) -> str:
        """Re-encode [start, end) of the input as mono MP3."""

    @abstractmethod
    def trim_to_duration(
        self, input_path: str, output_path: str, duration: float, fade_out: float = 2.0
    ) -> str:
        """Re-encode the first `duration` seconds with a closing fade-out."""

    @abstractmethod
    def concatenate(
        self,
        input_paths: list[str],
        output_path: str,
        intro_path: Optional[str] = None,
        outro_path: Optional[str] = None,
        intro_fade_out: float = 3.0,
        outro_fade_in: float = 2.0,
    ) -> str:
        """Resample, fade the intro/outro edges and concat in one filter graph."""

    @abstractmethod
    def measure_loudness(
        self, input_path: str, target: LoudnessTarget
    ) -> LoudnessMeasurement:
        """Loudness normalization pass 1 (analysis only)."""

    @abstractmethod
    def apply_loudness(
        self,
        input_path: str,
        output_path: str,
        target: LoudnessTarget,
        measured: LoudnessMeasurement,
    ) -> str:
        """Loudness normalization pass 2 using pass-1 measurements."""
