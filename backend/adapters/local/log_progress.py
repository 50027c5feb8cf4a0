"""LogProgressAdapter — reports episode pipeline stages via logging."""

import logging
from typing import Optional

from ports.progress import ProgressPort

logger = logging.getLogger(__name__)

STAGE_LABELS = {
    "trim_music": "Stripping intro/outro music",
    "transcription": "Transcribing",
    "build_transcript": "Filtering transcript",
    "assembly": "Assembling episode",
}


class LogProgressAdapter(ProgressPort):
    def report(
        self,
        run_id: str,
        stage: str,
        progress: float = 0.0,
        detail: Optional[str] = None,
    ) -> None:
        parts = [f"[{run_id}]", STAGE_LABELS.get(stage, stage)]
        if progress > 0:
            parts.append(f"({progress:.0%})")
        if detail:
            parts.append(f": {detail}")
        logger.info(" ".join(parts))

    def stage_finished(self, run_id: str, stage: str, elapsed: float) -> None:
        logger.info(f"[{run_id}] {stage} finished in {elapsed:.1f}s")
