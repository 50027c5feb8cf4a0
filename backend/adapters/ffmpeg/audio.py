"""FFmpegAudioAdapter — every audio operation as an ffmpeg subprocess."""

import os
import logging
import tempfile
import subprocess
from typing import Optional

from adapters.ffmpeg import filters
from adapters.ffmpeg.parsers import parse_loudnorm, parse_silencedetect, stderr_tail
from adapters.ffmpeg.probe import DurationProbe
from domain.errors import (
    AssemblyError, AudioProcessingError, EngineNotFoundError,
)
from domain.models import LoudnessMeasurement, LoudnessTarget, SilenceEvent
from ports.audio import AudioProcessingPort

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_BITRATE = "192k"


class FFmpegAudioAdapter(AudioProcessingPort):
    def __init__(
        self,
        ffmpeg_bin: str = "ffmpeg",
        probe: Optional[DurationProbe] = None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        bitrate: str = DEFAULT_BITRATE,
        temp_dir: Optional[str] = None,
    ):
        self._ffmpeg_bin = ffmpeg_bin
        self._probe = probe or DurationProbe()
        self.sample_rate = sample_rate
        self.bitrate = bitrate
        self._temp_dir = temp_dir

    def verify(self) -> None:
        """Raise EngineNotFoundError unless `ffmpeg -version` succeeds."""
        try:
            result = subprocess.run(
                [self._ffmpeg_bin, "-version"], capture_output=True, text=True
            )
        except FileNotFoundError:
            result = None
        if result is None or result.returncode != 0:
            raise EngineNotFoundError(
                f"{self._ffmpeg_bin} is not installed or not on $PATH. "
                "Install with: brew install ffmpeg (or apt-get install ffmpeg)"
            )

    def probe_duration(self, path: str) -> float:
        return self._probe.duration(path)

    def detect_silences(
        self, path: str, noise_db: float, min_gap: float
    ) -> list[SilenceEvent]:
        args = [
            "-hide_banner", "-nostats",
            "-i", path,
            "-af", filters.silencedetect(noise_db, min_gap),
            "-f", "null", "-",
        ]
        result = self._run_raw(args)
        if result.returncode != 0:
            logger.warning(
                f"Silence detection failed for {path} (exit {result.returncode}), "
                "returning empty list"
            )
            return []
        return parse_silencedetect(result.stderr)

    def bandpass(self, input_path: str, low_hz: int, high_hz: int) -> str:
        output_path = self._temp_path("bandpass", ".wav")
        args = [
            "-y",
            "-i", input_path,
            "-af", filters.bandpass(low_hz, high_hz),
            "-ar", str(self.sample_rate),
            output_path,
        ]
        try:
            self._run(args, "bandpass filter")
        except Exception:
            if os.path.exists(output_path):
                os.unlink(output_path)
            raise
        return output_path

    def extract_segment(
        self, input_path: str, output_path: str, start: float, end: float
    ) -> str:
        args = [
            "-y",
            "-ss", str(start),
            "-i", input_path,
            "-t", str(end - start),
            "-af", filters.standard_format(self.sample_rate),
            *self._mp3_output(output_path),
        ]
        logger.info(f"Extracting {start:.1f}s → {end:.1f}s from {input_path}")
        self._run(args, "extract speech")
        return output_path

    def trim_to_duration(
        self, input_path: str, output_path: str, duration: float, fade_out: float = 2.0
    ) -> str:
        fade_start = max(duration - fade_out, 0)
        args = [
            "-y",
            "-i", input_path,
            "-t", str(duration),
            "-af", f"{filters.fade_out(fade_start, fade_out)},{filters.standard_format(self.sample_rate)}",
            *self._mp3_output(output_path),
        ]
        logger.info(f"Trimming {input_path} to {duration:.1f}s with fade-out")
        self._run(args, "trim")
        return output_path

    def concatenate(
        self,
        input_paths: list[str],
        output_path: str,
        intro_path: Optional[str] = None,
        outro_path: Optional[str] = None,
        intro_fade_out: float = 3.0,
        outro_fade_in: float = 2.0,
    ) -> str:
        ordered: list[str] = []
        edge_filters: list[Optional[str]] = []

        if intro_path:
            intro_duration = self.probe_duration(intro_path)
            ordered.append(intro_path)
            edge_filters.append(
                filters.fade_out(max(intro_duration - intro_fade_out, 0), intro_fade_out)
            )
        for path in input_paths:
            ordered.append(path)
            edge_filters.append(None)
        if outro_path:
            ordered.append(outro_path)
            edge_filters.append(filters.fade_in(outro_fade_in))

        args = ["-y"]
        for path in ordered:
            args += ["-i", path]
        args += [
            "-filter_complex", filters.concat_graph(edge_filters, self.sample_rate),
            "-map", "[out]",
            *self._mp3_output(output_path),
        ]
        self._run(args, "concatenate", error_cls=AssemblyError)
        return output_path

    def measure_loudness(
        self, input_path: str, target: LoudnessTarget
    ) -> LoudnessMeasurement:
        args = [
            "-hide_banner", "-nostats",
            "-i", input_path,
            "-af", filters.loudnorm_analyze(target),
            "-f", "null", "-",
        ]
        result = self._run(args, "loudnorm analysis", error_cls=AssemblyError)
        measured = parse_loudnorm(result.stderr)
        logger.info(
            f"Measured loudness: I={measured.input_i} LUFS, TP={measured.input_tp} dBTP, "
            f"LRA={measured.input_lra} LU"
        )
        return measured

    def apply_loudness(
        self,
        input_path: str,
        output_path: str,
        target: LoudnessTarget,
        measured: LoudnessMeasurement,
    ) -> str:
        args = [
            "-y",
            "-i", input_path,
            "-af", filters.loudnorm_apply(target, measured),
            *self._mp3_output(output_path),
        ]
        self._run(args, "loudnorm apply", error_cls=AssemblyError)
        return output_path

    def _mp3_output(self, output_path: str) -> list[str]:
        return [
            "-ar", str(self.sample_rate),
            "-c:a", "libmp3lame", "-b:a", self.bitrate,
            output_path,
        ]

    def _temp_path(self, label: str, suffix: str) -> str:
        temp_file = tempfile.NamedTemporaryFile(
            prefix=f"podgen_{label}_{os.getpid()}_",
            suffix=suffix,
            dir=self._temp_dir,
            delete=False,
        )
        temp_file.close()
        return temp_file.name

    def _run(
        self,
        args: list[str],
        step: str,
        error_cls: type[AudioProcessingError] = AudioProcessingError,
    ) -> subprocess.CompletedProcess:
        result = self._run_raw(args)
        if result.returncode != 0:
            logger.error(f"ffmpeg {step} failed: {stderr_tail(result.stderr)}")
            raise error_cls(step, result.returncode, stderr_tail(result.stderr))
        return result

    def _run_raw(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = [self._ffmpeg_bin, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise EngineNotFoundError(
                f"{self._ffmpeg_bin} is not installed or not on $PATH"
            ) from e
