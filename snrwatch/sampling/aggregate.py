"""Reduce a sample buffer to a single averaged record."""

from __future__ import annotations

from snrwatch.dsp.estimation import dbm_to_percent
from snrwatch.errors import EmptyResult
from snrwatch.sampling.buffer import SampleBuffer
from snrwatch.sampling.types import AverageRecord


def _mean(total: int, count: int) -> int:
    """Arithmetic mean with truncation toward zero."""
    q = abs(total) // count
    return -q if total < 0 else q


def compute_average(buffer: SampleBuffer) -> AverageRecord:
    """Average the numeric measurements of ``buffer``.

    Identifier, frequency and channel come from the first sample. The two
    percentages are derived from the averaged dBm values rather than averaged
    per sample.
    """
    count = len(buffer)
    if count == 0:
        raise EmptyResult("cannot average an empty sample buffer")

    first = buffer[0]
    signal = _mean(int(buffer.column("signal_strength_dbm").sum(dtype="int64")), count)
    quality = _mean(int(buffer.column("link_quality").sum(dtype="int64")), count)
    snr = _mean(int(buffer.column("snr_db").sum(dtype="int64")), count)
    noise = _mean(int(buffer.column("noise_floor_dbm").sum(dtype="int64")), count)

    return AverageRecord(
        ssid=first.ssid,
        signal_strength_dbm=signal,
        link_quality=quality,
        snr_db=snr,
        noise_floor_dbm=noise,
        signal_percent=dbm_to_percent(signal),
        noise_percent=dbm_to_percent(noise),
        sample_count=count,
        frequency_khz=first.frequency_khz,
        channel=first.channel,
    )
