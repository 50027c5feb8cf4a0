"""Post-processing for transcription segments.

Drops non-speech text (music, jingles, hallucinations) using two independent
signal families: the engine's own per-segment confidence metadata, and
acoustically detected music regions.
"""

import logging
from typing import Optional, Sequence

from domain.models import MusicRegion, TranscriptSegment

logger = logging.getLogger(__name__)

NO_SPEECH_PROB_THRESHOLD = 0.6
COMPRESSION_RATIO_THRESHOLD = 2.4
AVG_LOGPROB_THRESHOLD = -1.0
MIN_FLAGS_TO_DROP = 2


def confidence_flags(seg: TranscriptSegment) -> list[str]:
    """Names of the confidence thresholds this segment exceeds."""
    flags = []
    if seg.no_speech_prob is not None and seg.no_speech_prob > NO_SPEECH_PROB_THRESHOLD:
        flags.append(f"no_speech={seg.no_speech_prob:.2f}")
    if seg.compression_ratio is not None and seg.compression_ratio > COMPRESSION_RATIO_THRESHOLD:
        flags.append(f"compression={seg.compression_ratio:.2f}")
    if seg.avg_logprob is not None and seg.avg_logprob < AVG_LOGPROB_THRESHOLD:
        flags.append(f"logprob={seg.avg_logprob:.2f}")
    return flags


def filter_by_metadata_votes(
    segments: list[TranscriptSegment], min_flags: int = MIN_FLAGS_TO_DROP
) -> list[TranscriptSegment]:
    """Drop segments on which at least `min_flags` confidence signals agree.

    A single exceeded threshold is a common false positive on real speech,
    so it never drops a segment on its own.
    """
    if not segments:
        return segments

    kept = []
    dropped = 0
    for seg in segments:
        flags = confidence_flags(seg)
        if len(flags) >= min_flags:
            dropped += 1
            logger.info(
                f"  Drop {seg.start:.1f}s→{seg.end:.1f}s ({', '.join(flags)}): "
                f"\"{seg.text.strip()[:50]}\""
            )
        else:
            kept.append(seg)

    if dropped:
        logger.info(f"Metadata filter: kept {len(kept)}/{len(segments)} (dropped {dropped})")

    return kept


def exclude_music_segments(
    segments: list[TranscriptSegment], music_regions: Sequence[MusicRegion]
) -> list[TranscriptSegment]:
    """Drop segments whose start falls inside a detected music region."""
    if not music_regions:
        return segments

    kept = []
    for seg in segments:
        region = _region_containing(seg.start, music_regions)
        if region is None:
            kept.append(seg)
            continue
        logger.info(
            f"  Excluding {seg.start:.1f}s→{seg.end:.1f}s "
            f"(in music {region.start:.1f}→{region.end:.1f}): \"{seg.text.strip()[:50]}\""
        )

    dropped = len(segments) - len(kept)
    if dropped:
        logger.info(
            f"Music filter: excluded {dropped} segments in {len(music_regions)} region(s)"
        )
    return kept


def filter_transcript(
    segments: list[TranscriptSegment], music_regions: Sequence[MusicRegion]
) -> list[TranscriptSegment]:
    """Metadata voting first, then the acoustic cross-check."""
    logger.info(f"Filtering {len(segments)} transcript segments")
    kept = filter_by_metadata_votes(segments)
    return exclude_music_segments(kept, music_regions)


def has_confidence_metadata(segments: Sequence[TranscriptSegment]) -> bool:
    """Whether the filter applies; engines without metrics skip it."""
    return bool(segments) and all(seg.has_confidence_metadata for seg in segments)


def join_text(segments: Sequence[TranscriptSegment]) -> str:
    return " ".join(seg.text.strip() for seg in segments).strip()


def _region_containing(
    t: float, music_regions: Sequence[MusicRegion]
) -> Optional[MusicRegion]:
    for region in music_regions:
        if region.contains(t):
            return region
    return None
