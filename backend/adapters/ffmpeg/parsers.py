"""Parsers for ffmpeg's diagnostic output (stderr).

silencedetect emits one event token per line:

    [silencedetect @ 0x...] silence_start: 12.34
    [silencedetect @ 0x...] silence_end: 15.01 | silence_duration: 2.67

loudnorm with print_format=json emits a bare JSON object, one key per line,
after its "[Parsed_loudnorm_N @ 0x...]" banner.
"""

import re

from pydantic import ValidationError

from domain.errors import LoudnessParseError, SilenceParseError
from domain.models import LoudnessMeasurement, SilenceEvent
from mappers import report_to_measurement
from models import LoudnormReport

_NUMBER = r"(-?\d+(?:\.\d+)?(?:e-?\d+)?)"
_SILENCE_START = re.compile(r"silence_start:\s*" + _NUMBER)
_SILENCE_END = re.compile(r"silence_end:\s*" + _NUMBER)
_SILENCE_DURATION = re.compile(r"silence_duration:\s*" + _NUMBER)


def parse_silencedetect(output: str) -> list[SilenceEvent]:
    """Turn silencedetect's start/end token stream into SilenceEvents.

    A silence_start opens a pending event and the next silence_end closes it.
    When the start token was lost (truncated output), the start is derived as
    end - duration. A trailing start without an end is discarded.
    """
    events: list[SilenceEvent] = []
    pending_start = None

    for lineno, line in enumerate(output.splitlines(), start=1):
        start_match = _SILENCE_START.search(line)
        if start_match:
            pending_start = float(start_match.group(1))
            continue

        end_match = _SILENCE_END.search(line)
        if not end_match:
            continue

        duration_match = _SILENCE_DURATION.search(line)
        if not duration_match:
            raise SilenceParseError(
                f"line {lineno}: silence_end without silence_duration: {line.strip()!r}"
            )

        end = float(end_match.group(1))
        duration = float(duration_match.group(1))
        start = pending_start if pending_start is not None else end - duration
        if start > end:
            raise SilenceParseError(
                f"line {lineno}: silence_start {start} after silence_end {end}"
            )

        events.append(SilenceEvent(start=start, end=end, reported_duration=duration))
        pending_start = None

    return events


def parse_loudnorm(output: str) -> LoudnessMeasurement:
    """Extract the last loudnorm JSON block and validate it."""
    lines = output.splitlines()

    block_start = None
    for i, line in enumerate(lines):
        if line.strip() == "{":
            block_start = i
    if block_start is None:
        raise LoudnessParseError("no loudnorm JSON block in ffmpeg output")

    block: list[str] = []
    for line in lines[block_start:]:
        block.append(line)
        if line.strip() == "}":
            break
    else:
        raise LoudnessParseError("unterminated loudnorm JSON block in ffmpeg output")

    try:
        report = LoudnormReport.model_validate_json("\n".join(block))
    except ValidationError as e:
        raise LoudnessParseError(f"invalid loudnorm measurements: {e}") from e

    return report_to_measurement(report)


def stderr_tail(stderr: str, lines: int = 5) -> str:
    """Last few non-empty lines of an engine's error channel."""
    kept = [line for line in stderr.splitlines() if line.strip()]
    return "\n".join(kept[-lines:])
