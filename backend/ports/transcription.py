"""TranscriptionPort — abstract interface for ASR engines."""

from abc import ABC, abstractmethod
from typing import Optional

from domain.models import TranscriptionResult


class TranscriptionPort(ABC):
    @abstractmethod
    def transcribe(
        self,
        audio_path: str,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        """Transcribe an audio file. Raises TranscriptionError."""

    @abstractmethod
    def engine_name(self) -> str:
        """Short engine code, e.g. 'open' or 'groq'."""

    @abstractmethod
    def model_name(self) -> str:
        """The model the engine is configured with."""
