"""Boundary heuristics over silence-event streams.

Pure functions: they take the events silencedetect produced plus the track
duration and decide where speech starts and ends, which spans are music, and
where trailing music begins. The use cases in use_cases/boundaries.py run
ffmpeg and feed these.

On a band-limited (300–3000 Hz) signal, instrumental music is quiet while
speech stays loud, so long "silences" there are music. On the raw signal,
music is continuous audio and the pauses between sentences are the gaps.
"""

import logging
from typing import Optional, Sequence

from domain.models import MusicRegion, SilenceEvent, SpeechBoundary, TimeRange

logger = logging.getLogger(__name__)


def find_speech_start(
    silences: Sequence[SilenceEvent],
    scan_limit: float = 120.0,
    min_music_duration: float = 3.0,
) -> float:
    """First intro event long enough to be music; speech begins where it ends."""
    for s in silences:
        if s.end > scan_limit:
            continue
        if s.duration >= min_music_duration:
            logger.info(f"Intro music detected: 0s → {s.end:.1f}s")
            return s.end
    return 0.0


def find_speech_end(
    silences: Sequence[SilenceEvent],
    total_duration: float,
    scan_limit: float = 120.0,
    min_music_duration: float = 3.0,
) -> float:
    """Last outro gap followed by enough audio to be music; speech ends at its start."""
    outro_start = max(total_duration - scan_limit, 0)
    for s in reversed(silences):
        if s.start < outro_start:
            break
        if total_duration - s.end >= min_music_duration:
            logger.info(f"Outro music detected: {s.start:.1f}s → {total_duration:.1f}s")
            return s.start
    return total_duration


def pad_boundary(
    speech_start: float,
    speech_end: float,
    total_duration: float,
    padding: float = 1.5,
    min_speech_duration: float = 30.0,
) -> SpeechBoundary:
    """Widen the speech span by `padding` and fall back to the full track when
    what remains is too short to trust."""
    start = max(speech_start - padding, 0.0)
    end = min(speech_end + padding, total_duration)

    if end - start < min_speech_duration:
        logger.info(
            f"Speech estimate would leave {end - start:.1f}s "
            f"(< {min_speech_duration:.0f}s), ignoring boundaries"
        )
        return SpeechBoundary(0.0, total_duration, total_duration, fallback=True)

    return SpeechBoundary(start, end, total_duration)


def merge_music_regions(
    silences: Sequence[TimeRange],
    min_duration: float = 5.0,
    merge_gap: float = 1.5,
) -> list[MusicRegion]:
    """Merge gaps separated by short loud bursts; keep the long merged spans.

    A loud interval shorter than `merge_gap` between two band-limited silences
    is a musical transient rather than speech resuming.
    """
    merged: list[list[float]] = []
    for s in silences:
        if not merged or s.start - merged[-1][1] > merge_gap:
            merged.append([s.start, s.end])
        else:
            merged[-1][1] = max(merged[-1][1], s.end)

    return [
        MusicRegion(start=start, end=end)
        for start, end in merged
        if end > start and end - start >= min_duration
    ]


def find_trailing_music(
    silences: Sequence[SilenceEvent],
    total_duration: float,
    min_outro_music: float = 15.0,
) -> Optional[float]:
    """Where narration stops before trailing music, on raw (unfiltered) events.

    Walking backward, the latest gap with at least `min_outro_music` seconds of
    audio after it marks the cut; returns its start, or None.
    """
    for s in reversed(silences):
        if total_duration - s.end >= min_outro_music:
            return s.start
    return None
