"""
Integration tests against the real ffmpeg/ffprobe binaries.

Audio fixtures are synthesized: sine tones stand in for speech (inside the
300-3000 Hz band) and low drones stand in for music (attenuated by the band
filter).
"""

import shutil

import numpy as np
import pytest
import soundfile as sf

from adapters.ffmpeg.audio import FFmpegAudioAdapter
from adapters.ffmpeg.probe import DurationProbe
from domain.models import AudioTuning, LoudnessTarget
from use_cases.assemble import AssembleEpisodeUseCase
from use_cases.boundaries import MusicRegionDetector, SpeechBoundaryEstimator

SAMPLE_RATE = 44100

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
        reason="ffmpeg/ffprobe not installed",
    ),
]


def tone(seconds, freq, amplitude=0.5):
    t = np.arange(int(seconds * SAMPLE_RATE)) / SAMPLE_RATE
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def quiet(seconds):
    return np.zeros(int(seconds * SAMPLE_RATE), dtype=np.float32)


def write_wav(path, *parts):
    sf.write(str(path), np.concatenate(parts), SAMPLE_RATE)
    return str(path)


@pytest.fixture
def adapter(tmp_path):
    return FFmpegAudioAdapter(probe=DurationProbe(), temp_dir=str(tmp_path))


class TestAssemblyIntegration:
    """End-to-end assembly with real encoding."""

    def test_intro_segment_outro_duration(self, adapter, tmp_path):
        intro = write_wav(tmp_path / "intro.wav", tone(5, 440))
        segment = write_wav(tmp_path / "segment.wav", tone(8, 660))
        outro = write_wav(tmp_path / "outro.wav", tone(6, 550))
        output = str(tmp_path / "out" / "episode.mp3")

        result = AssembleEpisodeUseCase(adapter).execute(
            [segment], output, intro_path=intro, outro_path=outro
        )

        assert result == output
        assert adapter.probe_duration(output) == pytest.approx(19.0, abs=0.5)
        assert not (tmp_path / "out" / "episode_concat.mp3").exists()

    def test_three_segments_without_intro_or_outro(self, adapter, tmp_path):
        a = write_wav(tmp_path / "a.wav", tone(5, 440))
        b = write_wav(tmp_path / "b.wav", tone(8, 660))
        c = write_wav(tmp_path / "c.wav", tone(6, 550))
        output = str(tmp_path / "episode.mp3")

        result = AssembleEpisodeUseCase(adapter).execute([a, b, c], output)

        assert result == output
        assert adapter.probe_duration(output) == pytest.approx(19.0, abs=0.5)

    def test_loudness_lands_near_target(self, adapter, tmp_path):
        segment = write_wav(tmp_path / "segment.wav", tone(20, 1000, amplitude=0.05))
        output = str(tmp_path / "episode.mp3")
        target = LoudnessTarget()

        AssembleEpisodeUseCase(adapter, target).execute([segment], output)
        measured = adapter.measure_loudness(output, target)

        assert measured.input_i == pytest.approx(target.integrated, abs=2.0)


class TestDetectionIntegration:
    """Silence and boundary detection on synthetic audio."""

    def test_detects_gap(self, adapter, tmp_path):
        path = write_wav(tmp_path / "gap.wav", tone(2, 1000), quiet(3), tone(2, 1000))

        events = adapter.detect_silences(path, noise_db=-30, min_gap=0.7)

        assert len(events) == 1
        assert events[0].start == pytest.approx(2.0, abs=0.1)
        assert events[0].end == pytest.approx(5.0, abs=0.1)

    def test_unreadable_input_yields_no_silences(self, adapter, tmp_path):
        bogus = tmp_path / "bogus.mp3"
        bogus.write_text("not audio")

        assert adapter.detect_silences(str(bogus), noise_db=-30, min_gap=0.7) == []

    def test_intro_drone_is_stripped(self, adapter, tmp_path):
        path = write_wav(
            tmp_path / "episode.wav", tone(10, 50, amplitude=0.3), tone(40, 1000)
        )
        # Scan windows shorter than half the track so intro and outro don't overlap
        tuning = AudioTuning(intro_scan_limit=20, outro_scan_limit=20)

        boundary = SpeechBoundaryEstimator(adapter, tuning).estimate(path)

        assert boundary.fallback is False
        assert boundary.speech_start == pytest.approx(8.5, abs=0.5)
        assert boundary.speech_end == pytest.approx(50.0, abs=0.1)
        assert list(tmp_path.glob("podgen_bandpass_*")) == []

    def test_interior_drone_is_a_music_region(self, adapter, tmp_path):
        path = write_wav(
            tmp_path / "episode.wav",
            tone(20, 1000), tone(8, 50, amplitude=0.3), tone(20, 1000),
        )

        regions = MusicRegionDetector(adapter).detect(path)

        assert len(regions) == 1
        assert regions[0].start == pytest.approx(20.0, abs=0.5)
        assert regions[0].end == pytest.approx(28.0, abs=0.5)
