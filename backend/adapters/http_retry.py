"""Retry policy shared by the HTTP transcription engines.

Rate limits (429), service unavailable (503) and timeouts are retried with
2**attempt seconds of back-off; every other failure is raised immediately.
"""

import time
import logging
from typing import Callable

import httpx

from domain.errors import TranscriptionError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRYABLE_STATUS = {429, 503}


class RetryableStatus(Exception):
    pass


def send_with_retries(
    engine: str,
    send: Callable[[], dict],
    max_retries: int = MAX_RETRIES,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """Call send() until it returns a payload or the retries run out."""
    attempt = 0
    while True:
        attempt += 1
        try:
            return send()
        except (httpx.TimeoutException, RetryableStatus) as e:
            if attempt > max_retries:
                raise TranscriptionError(engine, f"failed after {attempt} attempts: {e}") from e
            delay = 2 ** attempt
            logger.warning(
                f"{engine} error (attempt {attempt}/{max_retries}): {e}. "
                f"Retrying in {delay}s..."
            )
            sleep(delay)
        except httpx.HTTPError as e:
            raise TranscriptionError(engine, str(e)) from e


def json_payload(engine: str, response: httpx.Response) -> dict:
    """Return the JSON body of a 200 response; classify any other status."""
    if response.status_code in RETRYABLE_STATUS:
        raise RetryableStatus(f"HTTP {response.status_code}: {response.text[:200]}")
    if response.status_code != 200:
        raise TranscriptionError(
            engine, f"API error {response.status_code}: {response.text[:500]}"
        )
    try:
        return response.json()
    except ValueError as e:
        raise TranscriptionError(engine, f"response is not JSON: {e}") from e
