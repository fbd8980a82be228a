"""Fixed-capacity sample store for a single observation run."""

from __future__ import annotations

from typing import Iterator, List

import numpy as np

from snrwatch.sampling.types import Sample

SAMPLE_DTYPE = np.dtype(
    [
        ("timestamp_ms", np.int64),
        ("signal_strength_dbm", np.int32),
        ("link_quality", np.int32),
        ("snr_db", np.int32),
        ("noise_floor_dbm", np.int32),
        ("frequency_khz", np.uint32),
        ("channel", np.int32),
    ]
)

_NUMERIC_FIELDS = SAMPLE_DTYPE.names


class SampleBufferFull(IndexError):
    pass


class SampleBuffer:
    """Append-only sample sequence preallocated at run start.

    Numeric fields live in a numpy structured array sized to ``capacity``;
    identifiers are kept alongside in insertion order.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._capacity = int(capacity)
        self._rows = np.zeros(self._capacity, dtype=SAMPLE_DTYPE)
        self._ssids: List[str] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._ssids)

    def __bool__(self) -> bool:
        return len(self._ssids) > 0

    def append(self, sample: Sample) -> None:
        idx = len(self._ssids)
        if idx >= self._capacity:
            raise SampleBufferFull(f"sample buffer full ({self._capacity} samples)")
        self._rows[idx] = tuple(getattr(sample, name) for name in _NUMERIC_FIELDS)
        self._ssids.append(sample.ssid)

    def column(self, name: str) -> np.ndarray:
        """Return a read-only view of one numeric field over the filled rows."""
        view = self._rows[name][: len(self._ssids)]
        view.flags.writeable = False
        return view

    def __getitem__(self, idx: int) -> Sample:
        count = len(self._ssids)
        if idx < 0:
            idx += count
        if not 0 <= idx < count:
            raise IndexError("sample index out of range")
        row = self._rows[idx]
        fields = {name: int(row[name]) for name in _NUMERIC_FIELDS}
        return Sample(ssid=self._ssids[idx], **fields)

    def __iter__(self) -> Iterator[Sample]:
        for idx in range(len(self._ssids)):
            yield self[idx]
