"""ProgressPort — abstract interface for reporting pipeline progress."""

from abc import ABC, abstractmethod
from typing import Optional


class ProgressPort(ABC):
    @abstractmethod
    def report(
        self,
        run_id: str,
        stage: str,
        progress: float = 0.0,
        detail: Optional[str] = None,
    ) -> None:
        """Report progress. stage: trim_music, transcription, build_transcript, assembly."""

    @abstractmethod
    def stage_finished(self, run_id: str, stage: str, elapsed: float) -> None:
        """Report that a stage completed after `elapsed` seconds."""
