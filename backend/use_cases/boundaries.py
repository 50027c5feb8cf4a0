"""Boundary use cases — run ffmpeg detection and apply the heuristics.

SpeechBoundaryEstimator and MusicRegionDetector band-limit the input to the
speech range first; TailTrimRefiner works on the raw signal to catch trailing
music whose energy overlaps the speech band. All three are fail-open: when a
heuristic is not confident, content is left untouched.
"""

import os
import logging
from typing import Optional

from boundary_detection import (
    find_speech_end, find_speech_start, find_trailing_music,
    merge_music_regions, pad_boundary,
)
from domain.models import AudioTuning, MusicRegion, SilenceEvent, SpeechBoundary
from ports.audio import AudioProcessingPort

logger = logging.getLogger(__name__)


class _BandLimitedDetection:
    def __init__(self, audio: AudioProcessingPort, tuning: Optional[AudioTuning] = None):
        self._audio = audio
        self._tuning = tuning or AudioTuning()

    def _band_limited_silences(self, input_path: str) -> list[SilenceEvent]:
        t = self._tuning
        filtered_path = self._audio.bandpass(input_path, t.bandpass_low_hz, t.bandpass_high_hz)
        try:
            silences = self._audio.detect_silences(
                filtered_path, noise_db=t.bandpass_noise_db, min_gap=t.bandpass_min_gap
            )
        finally:
            if os.path.exists(filtered_path):
                os.unlink(filtered_path)

        logger.info(
            f"Bandpass silence detection: {len(silences)} gaps "
            f"(threshold: {t.bandpass_noise_db:g}dB)"
        )
        return silences


class SpeechBoundaryEstimator(_BandLimitedDetection):
    """Find where narration starts and ends amid leading/trailing music."""

    def estimate(self, input_path: str) -> SpeechBoundary:
        t = self._tuning
        total_duration = self._audio.probe_duration(input_path)
        silences = self._band_limited_silences(input_path)

        speech_start = find_speech_start(
            silences, scan_limit=t.intro_scan_limit, min_music_duration=t.min_music_duration
        )
        speech_end = find_speech_end(
            silences, total_duration,
            scan_limit=t.outro_scan_limit, min_music_duration=t.min_music_duration,
        )

        boundary = pad_boundary(
            speech_start, speech_end, total_duration,
            padding=t.strip_padding, min_speech_duration=t.min_speech_duration,
        )
        if not boundary.fallback:
            logger.info(
                f"Bandpass speech estimate: {boundary.speech_start:.1f}s → "
                f"{boundary.speech_end:.1f}s"
            )
        return boundary


class MusicRegionDetector(_BandLimitedDetection):
    """Find music interludes anywhere in the track."""

    def detect(
        self,
        input_path: str,
        min_duration: Optional[float] = None,
        merge_gap: Optional[float] = None,
    ) -> list[MusicRegion]:
        t = self._tuning
        min_duration = t.music_min_duration if min_duration is None else min_duration
        merge_gap = t.music_merge_gap if merge_gap is None else merge_gap

        silences = self._band_limited_silences(input_path)
        regions = merge_music_regions(silences, min_duration=min_duration, merge_gap=merge_gap)

        for r in regions:
            logger.info(f"Music region: {r.start:.1f}s → {r.end:.1f}s ({r.duration:.1f}s)")
        if regions:
            logger.info(f"Found {len(regions)} music region(s)")
        return regions


class TailTrimRefiner:
    """Second pass that cuts trailing music the band-limited estimate missed.

    Only ever shortens the input; returns the input path when nothing
    material would be cut.
    """

    def __init__(self, audio: AudioProcessingPort, tuning: Optional[AudioTuning] = None):
        self._audio = audio
        self._tuning = tuning or AudioTuning()

    def refine(self, trimmed_path: str, output_path: str) -> str:
        t = self._tuning
        total_duration = self._audio.probe_duration(trimmed_path)
        silences = self._audio.detect_silences(
            trimmed_path, noise_db=t.silence_noise_db, min_gap=t.silence_min_gap
        )

        speech_end = find_trailing_music(
            silences, total_duration, min_outro_music=t.min_outro_music
        )
        if speech_end is None:
            return trimmed_path

        savings = total_duration - speech_end
        if savings < t.tail_min_savings:
            logger.debug(f"Tail refinement would only cut {savings:.1f}s, skipping")
            return trimmed_path

        logger.info(
            f"Refining tail: speech ends at {speech_end:.1f}s, cutting {savings:.1f}s "
            f"of trailing music (total was {total_duration:.1f}s)"
        )
        return self._audio.trim_to_duration(
            trimmed_path, output_path, speech_end + t.tail_padding, fade_out=t.tail_fade_out
        )
