import os
import logging
from dataclasses import fields
from typing import Dict, Optional, Any
from pathlib import Path

from dotenv import load_dotenv

from domain.models import AudioTuning, LoudnessTarget

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8001
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_BITRATE = "192k"
DEFAULT_ENGINES = "open"
DEFAULT_WHISPER_MODEL = "whisper-1"
DEFAULT_GROQ_MODEL = "whisper-large-v3"
DEFAULT_SCRIBE_MODEL = "scribe_v2"


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    @classmethod
    def reload(cls) -> "Config":
        """Re-read the environment (tests, long-running servers after edits)."""
        cls._instance = None
        return cls()

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"
        self.temp_dir = os.environ.get("TEMP_DIR", "/tmp/podgen")
        self.output_dir = os.environ.get("OUTPUT_DIR", "output")

        self.ffmpeg_bin = os.environ.get("FFMPEG_BIN", "ffmpeg")
        self.ffprobe_bin = os.environ.get("FFPROBE_BIN", "ffprobe")
        self.sample_rate = int(os.environ.get("SAMPLE_RATE", DEFAULT_SAMPLE_RATE))
        self.bitrate = os.environ.get("BITRATE", DEFAULT_BITRATE)
        self.target_lufs = float(os.environ.get("TARGET_LUFS", "-16"))
        self.true_peak = float(os.environ.get("TRUE_PEAK", "-1.5"))
        self.lra = float(os.environ.get("LRA", "11"))

        # First code is the primary engine; duplicates are ignored.
        codes = os.environ.get("TRANSCRIPTION_ENGINES", DEFAULT_ENGINES)
        self.transcription_engines = list(
            dict.fromkeys(c.strip().lower() for c in codes.split(",") if c.strip())
        )
        self.transcription_language = os.environ.get("TRANSCRIPTION_LANGUAGE") or None
        self.transcription_timeout = float(os.environ.get("TRANSCRIPTION_TIMEOUT", "300"))
        self.openai_api_key = os.environ.get("OPENAI_API_KEY")
        self.whisper_model = os.environ.get("WHISPER_MODEL", DEFAULT_WHISPER_MODEL)
        self.groq_api_key = os.environ.get("GROQ_API_KEY")
        self.groq_model = os.environ.get("GROQ_WHISPER_MODEL", DEFAULT_GROQ_MODEL)
        self.elevenlabs_api_key = os.environ.get("ELEVENLABS_API_KEY")
        self.elevenlabs_model = os.environ.get("ELEVENLABS_SCRIBE_MODEL", DEFAULT_SCRIBE_MODEL)

        Path(self.temp_dir).mkdir(parents=True, exist_ok=True)

    def audio_tuning(self) -> AudioTuning:
        """AudioTuning with any field overridden by its upper-cased env var."""
        overrides = {}
        for f in fields(AudioTuning):
            raw = os.environ.get(f.name.upper())
            if raw is not None and raw.strip():
                overrides[f.name] = type(f.default)(float(raw))
        return AudioTuning(**overrides)

    def loudness_target(self) -> LoudnessTarget:
        return LoudnessTarget(integrated=self.target_lufs, true_peak=self.true_peak, lra=self.lra)

    def get_api_key(self, engine: str) -> Optional[str]:
        return {
            "open": self.openai_api_key,
            "groq": self.groq_api_key,
            "elab": self.elevenlabs_api_key,
        }.get(engine)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "temp_dir": self.temp_dir,
            "output_dir": self.output_dir,
            "sample_rate": self.sample_rate,
            "bitrate": self.bitrate,
            "target_lufs": self.target_lufs,
            "true_peak": self.true_peak,
            "lra": self.lra,
            "transcription_engines": self.transcription_engines,
            "transcription_language": self.transcription_language,
            "whisper_model": self.whisper_model,
            "groq_model": self.groq_model,
            "elevenlabs_model": self.elevenlabs_model,
            "has_openai_key": self.openai_api_key is not None,
            "has_groq_key": self.groq_api_key is not None,
            "has_elevenlabs_key": self.elevenlabs_api_key is not None,
        }


def get_config() -> Config:
    return Config()


def create_audio_adapter(cfg: Config, verify: bool = True):
    """Create the audio processing adapter (always FFmpeg), with its own duration cache."""
    from adapters.ffmpeg.audio import FFmpegAudioAdapter
    from adapters.ffmpeg.probe import DurationProbe

    adapter = FFmpegAudioAdapter(
        ffmpeg_bin=cfg.ffmpeg_bin,
        probe=DurationProbe(cfg.ffprobe_bin),
        sample_rate=cfg.sample_rate,
        bitrate=cfg.bitrate,
        temp_dir=cfg.temp_dir,
    )
    if verify:
        adapter.verify()
    return adapter


def create_transcription_adapters(cfg: Config):
    """Create one adapter per TRANSCRIPTION_ENGINES code, primary first.

    Uses lazy imports so httpx is only loaded when transcription is used.
    """
    from adapters.elevenlabs.transcription import ElevenLabsTranscriptionAdapter
    from adapters.openai.transcription import (
        GROQ_BASE_URL, OPENAI_BASE_URL, OpenAICompatibleTranscriptionAdapter,
    )

    def openai_compatible(code, base_url, model):
        return lambda: OpenAICompatibleTranscriptionAdapter(
            engine=code,
            api_key=cfg.get_api_key(code),
            model=model,
            base_url=base_url,
            timeout=cfg.transcription_timeout,
        )

    registry = {
        "open": openai_compatible("open", OPENAI_BASE_URL, cfg.whisper_model),
        "elab": lambda: ElevenLabsTranscriptionAdapter(
            api_key=cfg.get_api_key("elab"),
            model=cfg.elevenlabs_model,
            timeout=cfg.transcription_timeout,
        ),
        "groq": openai_compatible("groq", GROQ_BASE_URL, cfg.groq_model),
    }

    adapters = []
    for code in cfg.transcription_engines:
        if code not in registry:
            raise ValueError(
                f"Unknown transcription engine: {code!r}. Valid options: {', '.join(registry)}"
            )
        adapters.append(registry[code]())

    logger.info(
        f"Transcription engines: {', '.join(f'{a.engine_name()}={a.model_name()}' for a in adapters)}"
    )
    return adapters


def create_progress_adapter():
    from adapters.local.log_progress import LogProgressAdapter
    return LogProgressAdapter()
