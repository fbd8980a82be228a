"""Structured document renderer.

Documents are JSON objects framed by ``[JSON_START]`` / ``[JSON_END]`` lines so
a consumer can cut them out of surrounding console output. Layout and field
order are fixed; downstream parsers key on them.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from snrwatch.render.outbuf import DEFAULT_MAX_BYTES, OutputBuffer
from snrwatch.sampling.types import AverageRecord, Sample

START_MARKER = "[JSON_START]"
END_MARKER = "[JSON_END]"

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_text(value: str) -> str:
    """Escape quote, backslash, newline, carriage return and tab.

    Every other character, including other control bytes, passes through.
    """
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def int_to_text(value: int) -> str:
    """Render an integer in base 10 without locale-aware formatting."""
    value = int(value)
    negative = value < 0
    if negative:
        value = -value
    digits = []
    if value == 0:
        digits.append("0")
    while value > 0:
        digits.append(chr(ord("0") + value % 10))
        value //= 10
    if negative:
        digits.append("-")
    digits.reverse()
    return "".join(digits)


def _fields(out: OutputBuffer, pairs: Sequence[tuple], indent: str) -> None:
    last = len(pairs) - 1
    for idx, (key, value) in enumerate(pairs):
        if isinstance(value, str):
            rendered = '"' + escape_text(value) + '"'
        else:
            rendered = int_to_text(value)
        out.append(f'{indent}"{key}": {rendered}{"," if idx < last else ""}\n')


def _sample_fields(sample: Sample) -> Sequence[tuple]:
    return (
        ("timestamp_ms", sample.timestamp_ms),
        ("signal_strength_dbm", sample.signal_strength_dbm),
        ("link_quality", sample.link_quality),
        ("snr_db", sample.snr_db),
        ("noise_floor_dbm", sample.noise_floor_dbm),
        ("ssid", sample.ssid),
        ("frequency_khz", sample.frequency_khz),
        ("channel", sample.channel),
    )


def render_monitor_document(samples: Iterable[Sample], *, max_bytes: int = DEFAULT_MAX_BYTES) -> bytes:
    """Serialize every sample of a monitor run."""
    samples = list(samples)
    out = OutputBuffer(len(samples) * 250 + 1024, max_bytes=max_bytes)
    try:
        out.append(f"\n{START_MARKER}\n")
        out.append("{\n")
        out.append('  "collection_type": "monitor",\n')
        out.append('  "samples": [\n')
        for idx, sample in enumerate(samples):
            out.append("    {\n")
            _fields(out, _sample_fields(sample), "      ")
            out.append("    },\n" if idx < len(samples) - 1 else "    }\n")
        out.append("  ],\n")
        out.append(f'  "total_samples": {int_to_text(len(samples))}\n}}\n')
        out.append(f"{END_MARKER}\n\n")
        return out.getvalue()
    finally:
        out.release()


def render_base_document(avg: AverageRecord, *, max_bytes: int = DEFAULT_MAX_BYTES) -> bytes:
    """Serialize the averaged record of a base capture."""
    out = OutputBuffer(2048, max_bytes=max_bytes)
    try:
        out.append(f"\n{START_MARKER}\n")
        out.append("{\n")
        _fields(
            out,
            (
                ("collection_type", "base"),
                ("ssid", avg.ssid),
                ("sample_count", avg.sample_count),
                ("frequency_khz", avg.frequency_khz),
                ("channel", avg.channel),
                ("signal_strength_dbm", avg.signal_strength_dbm),
                ("link_quality", avg.link_quality),
                ("snr_db", avg.snr_db),
                ("noise_floor_dbm", avg.noise_floor_dbm),
                ("signal_percent", avg.signal_percent),
                ("noise_percent", avg.noise_percent),
            ),
            "  ",
        )
        out.append("}\n")
        out.append(f"{END_MARKER}\n\n")
        return out.getvalue()
    finally:
        out.release()
