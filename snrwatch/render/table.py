"""Fixed-width table rendering for operators."""

from __future__ import annotations

from typing import Optional, Sequence

from snrwatch.dsp.estimation import signal_quality_label
from snrwatch.render.outbuf import DEFAULT_MAX_BYTES, OutputBuffer
from snrwatch.sampling.types import AverageRecord, Sample

HEADER = "Time(ms) | RSSI(dBm) | Quality(%) | SNR(dB) | Noise(dBm)\n"
RULE = "---------+------------+------------+---------+-----------\n"
ROW_ESTIMATE = 100


def _frequency_line(out: OutputBuffer, frequency_khz: int, channel: int) -> None:
    if frequency_khz > 0:
        out.append(f"Frequency: {frequency_khz} kHz (Channel {channel})\n\n")
    else:
        out.append("\n")


def render_sample_table(
    samples: Sequence[Sample],
    duration_s: int,
    *,
    source: str = "BSS Accurate RSSI",
    note: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bytes:
    """Render one row per sample, headed by the network and channel of the first sample."""
    if not samples:
        raise ValueError("no samples to display")
    first = samples[0]
    out = OutputBuffer(512 + len(samples) * ROW_ESTIMATE, max_bytes=max_bytes)
    try:
        out.append(f"=== Raw WiFi Signal Data ({source}) ===\n")
        out.append(f"SSID: {first.ssid}\n")
        out.append(f"Duration: {duration_s} seconds\n")
        _frequency_line(out, first.frequency_khz, first.channel)
        out.append(HEADER)
        out.append(RULE)
        for s in samples:
            out.append(
                "%8d | %10d | %10d | %7d | %10d\n"
                % (s.timestamp_ms, s.signal_strength_dbm, s.link_quality, s.snr_db, s.noise_floor_dbm)
            )
        out.append(f"\nTotal samples: {len(samples)}\n")
        if note:
            out.append(f"Note: {note}\n")
        return out.getvalue()
    finally:
        out.release()


def render_average_table(
    avg: AverageRecord,
    *,
    source: str = "BSS Accurate RSSI",
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bytes:
    """Render the averaged measurements of a base capture with a quality grade."""
    out = OutputBuffer(4096, max_bytes=max_bytes)
    try:
        out.append(f"\n=== Base WiFi Signal Capture ({source}) ===\n")
        out.append(f"SSID: {avg.ssid}\n")
        out.append(f"Samples Averaged: {avg.sample_count}\n")
        _frequency_line(out, avg.frequency_khz, avg.channel)
        out.append(f"Averaged Signal Measurements ({source}):\n")
        out.append(f"  Signal Strength (RSSI): {avg.signal_strength_dbm} dBm ({avg.signal_percent}%)\n")
        out.append(f"  Link Quality: {avg.link_quality}%\n")
        out.append(f"  SNR: {avg.snr_db} dB\n")
        out.append(f"  Noise Floor: {avg.noise_floor_dbm} dBm ({avg.noise_percent}%)\n")
        marker, grade, hint = signal_quality_label(avg.signal_percent)
        out.append("\nSignal Quality:\n")
        out.append(f"  [{marker}] {grade} ({avg.signal_percent}%) - {hint}\n")
        return out.getvalue()
    finally:
        out.release()
