"""Dataclasses shared across the sampling, aggregation and rendering layers."""

from __future__ import annotations

from dataclasses import dataclass

MAX_SSID_BYTES = 63


def decode_ssid(raw: bytes) -> str:
    """Decode raw SSID bytes, truncated to 63 bytes, preserving undecodable bytes."""
    return bytes(raw[:MAX_SSID_BYTES]).decode("utf-8", errors="surrogateescape")


@dataclass(frozen=True)
class Sample:
    timestamp_ms: int
    signal_strength_dbm: int
    link_quality: int
    snr_db: int
    noise_floor_dbm: int
    ssid: str
    frequency_khz: int
    channel: int


@dataclass(frozen=True)
class AverageRecord:
    ssid: str
    signal_strength_dbm: int
    link_quality: int
    snr_db: int
    noise_floor_dbm: int
    signal_percent: int
    noise_percent: int
    sample_count: int
    frequency_khz: int
    channel: int


@dataclass(frozen=True)
class CollectionStats:
    """Bookkeeping for one sampling loop."""

    elapsed_ms: int
    polls: int
    failed_polls: int
