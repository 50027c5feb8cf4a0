"""Builders for ffmpeg -af / -filter_complex strings."""

from typing import Optional

from domain.models import LoudnessMeasurement, LoudnessTarget


def _num(value: float) -> str:
    """Format a number without float noise: 3.0 -> '3', 1.23456 -> '1.235'."""
    text = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def standard_format(sample_rate: int) -> str:
    return f"aresample={sample_rate},aformat=sample_fmts=fltp:channel_layouts=mono"


def bandpass(low_hz: int, high_hz: int) -> str:
    return f"highpass=f={low_hz},lowpass=f={high_hz}"


def silencedetect(noise_db: float, min_gap: float) -> str:
    return f"silencedetect=noise={_num(noise_db)}dB:d={_num(min_gap)}"


def fade_out(start: float, duration: float) -> str:
    return f"afade=t=out:st={_num(start)}:d={_num(duration)}"


def fade_in(duration: float) -> str:
    return f"afade=t=in:d={_num(duration)}"


def concat_graph(edge_filters: list[Optional[str]], sample_rate: int) -> str:
    """One filter graph that normalizes every input and concatenates them.

    edge_filters[i] is an extra filter (fade) for input i, or None.
    """
    parts = []
    labels = []
    for i, extra in enumerate(edge_filters):
        chain = f"[{i}:a]{standard_format(sample_rate)}"
        if extra:
            chain += f",{extra}"
        label = f"[a{i}]"
        parts.append(chain + label)
        labels.append(label)

    parts.append(f"{''.join(labels)}concat=n={len(edge_filters)}:v=0:a=1[out]")
    return ";".join(parts)


def loudnorm_analyze(target: LoudnessTarget) -> str:
    return (
        f"loudnorm=I={_num(target.integrated)}:TP={_num(target.true_peak)}"
        f":LRA={_num(target.lra)}:print_format=json"
    )


def loudnorm_apply(target: LoudnessTarget, measured: LoudnessMeasurement) -> str:
    params = [
        f"I={_num(target.integrated)}",
        f"TP={_num(target.true_peak)}",
        f"LRA={_num(target.lra)}",
        f"measured_I={measured.input_i}",
        f"measured_TP={measured.input_tp}",
        f"measured_LRA={measured.input_lra}",
        f"measured_thresh={measured.input_thresh}",
        f"offset={measured.target_offset}",
        "linear=true",
    ]
    return "loudnorm=" + ":".join(params)
