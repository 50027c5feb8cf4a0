"""OpenAICompatibleTranscriptionAdapter — OpenAI and Groq speech-to-text.

Both services expose POST {base_url}/audio/transcriptions with the same
multipart form. whisper-style models return verbose_json with per-segment
confidence metrics; the gpt-4o-*-transcribe family only returns plain json
(text, no segments), so its transcripts bypass segment filtering.
"""

import os
import time
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from adapters.http_retry import MAX_RETRIES, json_payload, send_with_retries
from domain.errors import TranscriptionError
from domain.models import TranscriptionResult
from mappers import response_to_result
from models import WhisperVerboseResponse
from ports.transcription import TranscriptionPort

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"

DEFAULT_TIMEOUT = 300.0


def supports_verbose_json(model: str) -> bool:
    return model.startswith("whisper")


class OpenAICompatibleTranscriptionAdapter(TranscriptionPort):
    def __init__(
        self,
        engine: str,
        api_key: str,
        model: str,
        base_url: str = OPENAI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        client: Optional[httpx.Client] = None,
        sleep=time.sleep,
    ):
        if not api_key:
            raise ValueError(f"No API key configured for transcription engine '{engine}'")
        self._engine = engine
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = client
        self._sleep = sleep

    def engine_name(self) -> str:
        return self._engine

    def model_name(self) -> str:
        return self._model

    def transcribe(
        self,
        audio_path: str,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        if not os.path.exists(audio_path):
            raise TranscriptionError(self._engine, f"Audio file not found: {audio_path}")

        size_mb = os.path.getsize(audio_path) / (1024 * 1024)
        verbose = supports_verbose_json(self._model)
        logger.info(
            f"Transcribing {audio_path} ({size_mb:.2f} MB, engine: {self._engine}, "
            f"model: {self._model}, language: {language})"
        )

        payload = send_with_retries(
            self._engine,
            lambda: self._post(audio_path, language, verbose),
            max_retries=self._max_retries,
            sleep=self._sleep,
        )

        try:
            response = WhisperVerboseResponse.model_validate(payload)
        except ValidationError as e:
            raise TranscriptionError(self._engine, f"unexpected response shape: {e}") from e

        result = response_to_result(self._engine, response, verbose=verbose)
        logger.info(
            f"{self._engine} transcription complete ({len(result.text)} chars, "
            f"{len(result.segments)} segments)"
        )
        if result.segments:
            logger.info(
                f"Speech boundaries: {result.speech_start:.1f}s → {result.speech_end:.1f}s"
            )
        return result

    def _post(self, audio_path: str, language: Optional[str], verbose: bool) -> dict:
        data = {
            "model": self._model,
            "response_format": "verbose_json" if verbose else "json",
        }
        if language:
            data["language"] = language

        client = self._client or httpx.Client(timeout=self._timeout)
        try:
            with open(audio_path, "rb") as f:
                response = client.post(
                    f"{self._base_url}/audio/transcriptions",
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    data=data,
                    files={"file": (os.path.basename(audio_path), f, "audio/mpeg")},
                )
        finally:
            if self._client is None:
                client.close()

        return json_payload(self._engine, response)
