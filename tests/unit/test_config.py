"""
Unit tests for environment-driven configuration.
"""

import pytest

from config import Config, create_progress_adapter, create_transcription_adapters
from domain.models import AudioTuning


ENV_VARS = [
    "TRANSCRIPTION_ENGINES", "OPENAI_API_KEY", "GROQ_API_KEY", "WHISPER_MODEL",
    "ELEVENLABS_API_KEY", "ELEVENLABS_SCRIBE_MODEL",
    "TRANSCRIPTION_LANGUAGE", "TARGET_LUFS", "STRIP_PADDING", "BANDPASS_LOW_HZ",
    "MIN_SPEECH_DURATION", "OUTPUT_DIR", "PORT",
]


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Clean environment; the singleton is reset around each test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TEMP_DIR", str(tmp_path / "work"))
    Config._instance = None
    yield monkeypatch
    Config._instance = None


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, env, tmp_path):
        cfg = Config()

        assert cfg.port == 8001
        assert cfg.transcription_engines == ["open"]
        assert cfg.transcription_language is None
        assert cfg.loudness_target().integrated == -16.0
        assert cfg.audio_tuning() == AudioTuning()
        assert (tmp_path / "work").is_dir()

    def test_singleton(self, env):
        assert Config() is Config()

    def test_reload_rereads_environment(self, env):
        first = Config()
        env.setenv("PORT", "9100")

        reloaded = Config.reload()

        assert reloaded is not first
        assert reloaded.port == 9100

    def test_engine_list_is_normalized(self, env):
        env.setenv("TRANSCRIPTION_ENGINES", " Groq, open,groq,, ")

        assert Config().transcription_engines == ["groq", "open"]

    def test_tuning_overrides(self, env):
        env.setenv("STRIP_PADDING", "2.5")
        env.setenv("BANDPASS_LOW_HZ", "250")
        env.setenv("MIN_SPEECH_DURATION", " ")

        tuning = Config().audio_tuning()

        assert tuning.strip_padding == 2.5
        assert tuning.bandpass_low_hz == 250
        assert isinstance(tuning.bandpass_low_hz, int)
        assert tuning.min_speech_duration == 30.0

    def test_as_dict_hides_keys(self, env):
        env.setenv("OPENAI_API_KEY", "sk-secret")

        settings = Config().as_dict()

        assert settings["has_openai_key"] is True
        assert "sk-secret" not in str(settings)


class TestAdapterFactories:
    """Tests for the adapter factory functions."""

    def test_transcription_adapters_primary_first(self, env):
        env.setenv("TRANSCRIPTION_ENGINES", "groq,open")
        env.setenv("OPENAI_API_KEY", "sk-open")
        env.setenv("GROQ_API_KEY", "gsk-groq")

        adapters = create_transcription_adapters(Config())

        assert [a.engine_name() for a in adapters] == ["groq", "open"]
        assert [a.model_name() for a in adapters] == ["whisper-large-v3", "whisper-1"]

    def test_elevenlabs_engine(self, env):
        env.setenv("TRANSCRIPTION_ENGINES", "open,elab")
        env.setenv("OPENAI_API_KEY", "sk-open")
        env.setenv("ELEVENLABS_API_KEY", "xi-key")
        env.setenv("ELEVENLABS_SCRIBE_MODEL", "scribe_v1")

        adapters = create_transcription_adapters(Config())

        assert [a.engine_name() for a in adapters] == ["open", "elab"]
        assert adapters[1].model_name() == "scribe_v1"
        assert Config().as_dict()["has_elevenlabs_key"] is True

    def test_elevenlabs_default_model(self, env):
        env.setenv("TRANSCRIPTION_ENGINES", "elab")
        env.setenv("ELEVENLABS_API_KEY", "xi-key")

        [adapter] = create_transcription_adapters(Config())

        assert adapter.model_name() == "scribe_v2"

    def test_unknown_engine(self, env):
        env.setenv("TRANSCRIPTION_ENGINES", "open,elevenlabs")
        env.setenv("OPENAI_API_KEY", "sk-open")

        with pytest.raises(ValueError) as exc_info:
            create_transcription_adapters(Config())

        assert "elevenlabs" in str(exc_info.value)

    def test_missing_api_key(self, env):
        with pytest.raises(ValueError):
            create_transcription_adapters(Config())

    def test_progress_adapter(self):
        adapter = create_progress_adapter()

        adapter.report("run1", "assembly", progress=0.5, detail="normalizing")
        adapter.stage_finished("run1", "assembly", 1.25)
