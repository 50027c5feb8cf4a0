"""ElevenLabsTranscriptionAdapter — ElevenLabs Scribe speech-to-text.

Scribe returns word-level timestamps instead of segments. Words are grouped
into sentence segments that close on terminal punctuation. Scribe reports no
confidence metrics, so every segment carries zeroed ones: the metadata votes
never fire, while the music-region cross-check still applies.
"""

import os
import re
import time
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from adapters.http_retry import MAX_RETRIES, json_payload, send_with_retries
from domain.errors import TranscriptionError
from domain.models import TranscriptionResult, TranscriptSegment
from models import ScribeResponse, ScribeWord
from ports.transcription import TranscriptionPort

logger = logging.getLogger(__name__)

ENGINE = "elab"
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
DEFAULT_MODEL = "scribe_v2"
DEFAULT_TIMEOUT = 300.0

SENTENCE_END = re.compile(r"[.!?]\s*$")


def group_words_into_segments(words: list[ScribeWord]) -> list[TranscriptSegment]:
    """Group timed words into sentence segments; trailing words form a final one.

    Spacing tokens and audio events ("(laughter)") are not words and are skipped.
    """
    segments = []
    current: list[ScribeWord] = []

    def flush():
        segments.append(TranscriptSegment(
            start=current[0].start,
            end=current[-1].end,
            text=" ".join(w.text for w in current).strip(),
            no_speech_prob=0.0,
            compression_ratio=0.0,
            avg_logprob=0.0,
        ))

    for word in words:
        if word.type != "word":
            continue
        current.append(word)
        if SENTENCE_END.search(word.text):
            flush()
            current = []

    if current:
        flush()
    return segments


class ElevenLabsTranscriptionAdapter(TranscriptionPort):
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = ELEVENLABS_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        client: Optional[httpx.Client] = None,
        sleep=time.sleep,
    ):
        if not api_key:
            raise ValueError(f"No API key configured for transcription engine '{ENGINE}'")
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = client
        self._sleep = sleep

    def engine_name(self) -> str:
        return ENGINE

    def model_name(self) -> str:
        return self._model

    def transcribe(
        self,
        audio_path: str,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        if not os.path.exists(audio_path):
            raise TranscriptionError(ENGINE, f"Audio file not found: {audio_path}")

        size_mb = os.path.getsize(audio_path) / (1024 * 1024)
        logger.info(
            f"Transcribing {audio_path} ({size_mb:.2f} MB, engine: {ENGINE}, "
            f"model: {self._model}, language: {language})"
        )

        payload = send_with_retries(
            ENGINE,
            lambda: self._post(audio_path, language),
            max_retries=self._max_retries,
            sleep=self._sleep,
        )

        try:
            response = ScribeResponse.model_validate(payload)
        except ValidationError as e:
            raise TranscriptionError(ENGINE, f"unexpected response shape: {e}") from e

        result = TranscriptionResult(
            engine=ENGINE,
            text=response.text,
            segments=group_words_into_segments(response.words),
        )
        logger.info(
            f"{ENGINE} transcription complete ({len(result.text)} chars, "
            f"{len(result.segments)} segments)"
        )
        return result

    def _post(self, audio_path: str, language: Optional[str]) -> dict:
        data = {
            "model_id": self._model,
            "timestamps_granularity": "word",
        }
        if language:
            data["language_code"] = language

        client = self._client or httpx.Client(timeout=self._timeout)
        try:
            with open(audio_path, "rb") as f:
                response = client.post(
                    f"{self._base_url}/speech-to-text",
                    headers={"xi-api-key": self._api_key},
                    data=data,
                    files={"file": (os.path.basename(audio_path), f, "audio/mpeg")},
                )
        finally:
            if self._client is None:
                client.close()

        return json_payload(ENGINE, response)
