"""Error taxonomy for the episode audio engine."""

from typing import Optional


class AudioEngineError(Exception):
    """Base error for the audio engine."""


class EngineNotFoundError(AudioEngineError):
    """Raised when ffmpeg/ffprobe cannot be executed."""


class ProbeError(AudioEngineError):
    """Raised when a file's duration cannot be probed."""

    def __init__(self, path: str, diagnostic: str = ""):
        self.path = path
        self.diagnostic = diagnostic
        message = f"ffprobe failed for {path}"
        if diagnostic:
            message += f": {diagnostic}"
        super().__init__(message)


class AudioProcessingError(AudioEngineError):
    """Raised when an ffmpeg step exits non-zero."""

    def __init__(self, step: str, returncode: Optional[int], diagnostic: str = ""):
        self.step = step
        self.returncode = returncode
        self.diagnostic = diagnostic
        super().__init__(f"ffmpeg {step} failed (exit {returncode}): {diagnostic}")


class AssemblyError(AudioProcessingError):
    """Raised when concatenation or loudness normalization fails."""


class OutputParseError(AudioEngineError):
    """Raised when engine diagnostic output does not match its grammar."""


class SilenceParseError(OutputParseError):
    """Raised on a malformed silencedetect event line."""


class LoudnessParseError(OutputParseError):
    """Raised when loudnorm measurements are missing or invalid."""


class TranscriptionError(AudioEngineError):
    """Raised when a transcription engine fails."""

    def __init__(self, engine: str, message: str):
        self.engine = engine
        super().__init__(f"{engine}: {message}")
