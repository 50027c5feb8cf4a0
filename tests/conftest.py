"""
Pytest configuration and fixtures for the audio engine tests.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import pytest

# Add backend/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

os.environ.setdefault("TEMP_DIR", str(Path(__file__).parent / ".tmp"))

from domain.models import LoudnessMeasurement, LoudnessTarget  # noqa: E402
from ports.audio import AudioProcessingPort  # noqa: E402


SAMPLE_MEASUREMENT = LoudnessMeasurement(
    input_i=-23.54,
    input_tp=-4.12,
    input_lra=6.3,
    input_thresh=-34.0,
    target_offset=0.42,
)


class FakeAudioAdapter(AudioProcessingPort):
    """Scripted audio engine: durations and silences are set per path.

    Band-limited detection is scripted separately via `bandpass_silences`,
    keyed by the unfiltered input path. Files written by extract/trim inherit
    their input's scripted silences. Every call is recorded in `calls`.
    """

    def __init__(
        self,
        durations: Optional[dict] = None,
        silences: Optional[dict] = None,
        bandpass_silences: Optional[dict] = None,
        tmp_dir: Optional[Path] = None,
    ):
        self.durations = dict(durations or {})
        self.silences = dict(silences or {})
        self.bandpass_silences = dict(bandpass_silences or {})
        self.tmp_dir = tmp_dir
        self.calls: list[tuple] = []
        self._bandpass_sources: dict[str, str] = {}

    def probe_duration(self, path):
        self.calls.append(("probe_duration", path))
        return self.durations[path]

    def detect_silences(self, path, noise_db, min_gap):
        self.calls.append(("detect_silences", path, noise_db, min_gap))
        if path in self._bandpass_sources:
            source = self._bandpass_sources[path]
            return list(self.bandpass_silences.get(source, []))
        return list(self.silences.get(path, []))

    def bandpass(self, input_path, low_hz, high_hz):
        self.calls.append(("bandpass", input_path, low_hz, high_hz))
        filtered = str(self.tmp_dir / f"bandpass_{len(self.calls)}.wav")
        Path(filtered).write_bytes(b"")
        self._bandpass_sources[filtered] = input_path
        return filtered

    def extract_segment(self, input_path, output_path, start, end):
        self.calls.append(("extract_segment", input_path, output_path, start, end))
        Path(output_path).write_bytes(b"mp3")
        self.durations[output_path] = end - start
        self.silences.setdefault(output_path, self.silences.get(input_path, []))
        self.bandpass_silences.setdefault(output_path, self.bandpass_silences.get(input_path, []))
        return output_path

    def trim_to_duration(self, input_path, output_path, duration, fade_out=2.0):
        self.calls.append(("trim_to_duration", input_path, output_path, duration, fade_out))
        Path(output_path).write_bytes(b"mp3")
        self.durations[output_path] = duration
        self.bandpass_silences.setdefault(output_path, self.bandpass_silences.get(input_path, []))
        return output_path

    def concatenate(self, input_paths, output_path, intro_path=None, outro_path=None,
                    intro_fade_out=3.0, outro_fade_in=2.0):
        self.calls.append(("concatenate", list(input_paths), output_path, intro_path, outro_path))
        Path(output_path).write_bytes(b"mp3")
        return output_path

    def measure_loudness(self, input_path, target: LoudnessTarget):
        self.calls.append(("measure_loudness", input_path, target))
        assert os.path.exists(input_path)
        return SAMPLE_MEASUREMENT

    def apply_loudness(self, input_path, output_path, target, measured):
        self.calls.append(("apply_loudness", input_path, output_path, target, measured))
        Path(output_path).write_bytes(b"normalized mp3")
        self.durations[output_path] = 19.0
        return output_path

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_audio(tmp_path):
    return FakeAudioAdapter(tmp_dir=tmp_path)


@pytest.fixture
def silencedetect_output():
    """Representative ffmpeg stderr from a silencedetect run."""
    return "\n".join([
        "Input #0, mp3, from 'episode.mp3':",
        "  Duration: 00:03:20.04, start: 0.025057, bitrate: 128 kb/s",
        "Stream mapping:",
        "  Stream #0:0 -> #0:0 (mp3 (mp3float) -> pcm_s16le (native))",
        "[silencedetect @ 0x55d1c1a0] silence_start: 0",
        "[silencedetect @ 0x55d1c1a0] silence_end: 4.5 | silence_duration: 4.5",
        "[silencedetect @ 0x55d1c1a0] silence_start: 61.2",
        "[silencedetect @ 0x55d1c1a0] silence_end: 62.05 | silence_duration: 0.85",
        "[silencedetect @ 0x55d1c1a0] silence_start: 170",
        "[silencedetect @ 0x55d1c1a0] silence_end: 171.25 | silence_duration: 1.25",
        "size=N/A time=00:03:20.04 bitrate=N/A speed= 512x",
        "video:0kB audio:0kB subtitle:0kB other streams:0kB global headers:0kB",
    ])


@pytest.fixture
def loudnorm_output():
    """Representative ffmpeg stderr from a loudnorm print_format=json run."""
    return "\n".join([
        "Input #0, mp3, from 'episode_concat.mp3':",
        "  Duration: 00:00:19.02, start: 0.025057, bitrate: 192 kb/s",
        "size=N/A time=00:00:19.00 bitrate=N/A speed= 210x",
        "[Parsed_loudnorm_0 @ 0x5602f8c0] ",
        "{",
        '\t"input_i" : "-23.54",',
        '\t"input_tp" : "-4.12",',
        '\t"input_lra" : "6.30",',
        '\t"input_thresh" : "-34.00",',
        '\t"output_i" : "-16.21",',
        '\t"output_tp" : "-1.50",',
        '\t"output_lra" : "5.10",',
        '\t"output_thresh" : "-26.62",',
        '\t"normalization_type" : "dynamic",',
        '\t"target_offset" : "0.42"',
        "}",
    ])
