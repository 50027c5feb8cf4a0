"""MultiEngineTranscriber — runs every configured engine on the same audio.

With one engine it is a plain call. With several, each engine runs as its own
ThreadPoolExecutor task whose Future is the only place its result lands; all
futures are joined before anything is read. A failed engine never cancels
its siblings: only the primary (first) engine is required to succeed, the
others' errors are reported alongside the results.
"""

import time
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from domain.errors import TranscriptionError
from domain.models import ComparisonResult, TranscriptionResult
from ports.transcription import TranscriptionPort

logger = logging.getLogger(__name__)


class MultiEngineTranscriber:
    def __init__(self, engines: list[TranscriptionPort], language: Optional[str] = None):
        if not engines:
            raise ValueError("At least one transcription engine is required")
        self._engines = engines
        self._language = language

    @property
    def engines(self) -> list[TranscriptionPort]:
        return list(self._engines)

    @property
    def primary_engine(self) -> str:
        return self._engines[0].engine_name()

    def execute(self, audio_path: str) -> ComparisonResult:
        if len(self._engines) == 1:
            engine = self._engines[0]
            result = self._run_engine(engine, audio_path)
            return ComparisonResult(primary=result, results={engine.engine_name(): result})

        logger.info(
            f"Running {len(self._engines)} engines in parallel: "
            f"{', '.join(e.engine_name() for e in self._engines)}"
        )
        with ThreadPoolExecutor(max_workers=len(self._engines)) as pool:
            futures: dict[str, Future] = {
                engine.engine_name(): pool.submit(self._run_engine, engine, audio_path)
                for engine in self._engines
            }

        results: dict[str, TranscriptionResult] = {}
        errors: dict[str, str] = {}
        for code, future in futures.items():
            error = future.exception()
            if error is None:
                results[code] = future.result()
            else:
                errors[code] = str(error)
                logger.warning(f"Engine '{code}' failed: {error}")

        primary_code = self.primary_engine
        if primary_code not in results:
            raise TranscriptionError(
                primary_code, f"primary engine failed: {errors.get(primary_code)}"
            )

        return ComparisonResult(primary=results[primary_code], results=results, errors=errors)

    def _run_engine(self, engine: TranscriptionPort, audio_path: str) -> TranscriptionResult:
        code = engine.engine_name()
        logger.info(f"Starting engine: {code} ({engine.model_name()})")
        start = time.monotonic()
        result = engine.transcribe(audio_path, language=self._language)
        logger.info(
            f"Engine '{code}' completed in {time.monotonic() - start:.2f}s "
            f"({len(result.text)} chars, {len(result.segments)} segments)"
        )
        return result
