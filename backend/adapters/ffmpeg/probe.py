"""DurationProbe — memoized ffprobe duration lookups."""

import os
import logging
import subprocess

from domain.errors import EngineNotFoundError, ProbeError
from adapters.ffmpeg.parsers import stderr_tail

logger = logging.getLogger(__name__)


class DurationProbe:
    """Caches durations per absolute path for the lifetime of the instance.

    Files are assumed immutable once probed, so the cache is never
    invalidated. Create one probe per pipeline run.
    """

    def __init__(self, ffprobe_bin: str = "ffprobe"):
        self._ffprobe_bin = ffprobe_bin
        self._cache: dict[str, float] = {}

    def duration(self, path: str) -> float:
        key = os.path.abspath(path)
        if key in self._cache:
            return self._cache[key]

        if not os.path.exists(path):
            raise ProbeError(path, "file not found")

        cmd = [
            self._ffprobe_bin,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "csv=p=0",
            path,
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise EngineNotFoundError(
                f"{self._ffprobe_bin} is not installed or not on $PATH"
            ) from e

        if result.returncode != 0:
            raise ProbeError(path, stderr_tail(result.stderr))

        raw = result.stdout.strip()
        try:
            duration = float(raw)
        except ValueError:
            raise ProbeError(path, f"unparseable duration {raw!r}")

        logger.debug(f"Probed {path}: {duration:.3f}s")
        self._cache[key] = duration
        return duration
