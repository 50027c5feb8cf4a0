"""AssembleEpisodeUseCase — concat with edge fades, then two-pass loudnorm.

Concatenation builds a single filter graph (resample, fades, concat) so the
inputs are decoded and encoded once. Normalization first measures the
concatenated file, then applies loudnorm in linear mode with the measured
values.
"""

import os
import logging
from pathlib import Path
from typing import Optional

from domain.models import AudioTuning, LoudnessTarget
from ports.audio import AudioProcessingPort

logger = logging.getLogger(__name__)


class AssembleEpisodeUseCase:
    def __init__(
        self,
        audio: AudioProcessingPort,
        target: Optional[LoudnessTarget] = None,
        tuning: Optional[AudioTuning] = None,
    ):
        self._audio = audio
        self._target = target or LoudnessTarget()
        self._tuning = tuning or AudioTuning()

    def execute(
        self,
        segment_paths: list[str],
        output_path: str,
        intro_path: Optional[str] = None,
        outro_path: Optional[str] = None,
    ) -> Optional[str]:
        """Assemble the episode. Returns output_path, or None when there is no input."""
        intro_path = intro_path if intro_path and os.path.exists(intro_path) else None
        outro_path = outro_path if outro_path and os.path.exists(outro_path) else None

        input_count = len(segment_paths) + bool(intro_path) + bool(outro_path)
        if input_count == 0:
            logger.info("No audio inputs provided")
            return None

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        concat_path = _intermediate_path(output_path)

        try:
            logger.info(f"Concatenating {input_count} audio files...")
            self._audio.concatenate(
                segment_paths, concat_path,
                intro_path=intro_path, outro_path=outro_path,
                intro_fade_out=self._tuning.intro_fade_out,
                outro_fade_in=self._tuning.outro_fade_in,
            )

            logger.info(f"Normalizing loudness to {self._target.integrated:g} LUFS...")
            measured = self._audio.measure_loudness(concat_path, self._target)
            try:
                self._audio.apply_loudness(concat_path, output_path, self._target, measured)
            except Exception:
                # A failed second pass can leave a truncated encode behind
                if os.path.exists(output_path):
                    logger.error(f"Loudness pass failed, removing partial output {output_path}")
                    os.unlink(output_path)
                raise
        finally:
            if os.path.exists(concat_path):
                os.unlink(concat_path)

        duration = self._audio.probe_duration(output_path)
        size_mb = os.path.getsize(output_path) / (1024 * 1024)
        logger.info(f"Output: {output_path} ({duration:.1f}s, {size_mb:.2f} MB)")
        return output_path


def _intermediate_path(output_path: str) -> str:
    path = Path(output_path)
    return str(path.with_name(f"{path.stem}_concat.mp3"))
