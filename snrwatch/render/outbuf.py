"""Append-only output buffer with doubling growth."""

from __future__ import annotations

from typing import Optional

from snrwatch.errors import AllocationFailure

DEFAULT_MAX_BYTES = 16 * 1024 * 1024
_SENTINEL = 0


class OutputBuffer:
    """Byte region with a logical length and a physical capacity.

    Text is encoded as UTF-8 with ``surrogateescape`` so identifiers decoded
    from raw SSID bytes are written back byte-for-byte. A NUL sentinel always
    sits right after the logical content.

    Growing past ``max_bytes`` (or running out of memory) releases the region
    and raises AllocationFailure; the buffer cannot be read afterwards.
    """

    def __init__(self, initial_size: int, *, max_bytes: int = DEFAULT_MAX_BYTES):
        if initial_size <= 0:
            raise ValueError("initial_size must be positive")
        self.max_bytes = int(max_bytes)
        self._length = 0
        self._data: Optional[bytearray] = self._allocate(int(initial_size))
        self._data[0] = _SENTINEL

    @property
    def capacity(self) -> int:
        return len(self._data) if self._data is not None else 0

    def __len__(self) -> int:
        return self._length

    def _allocate(self, size: int) -> bytearray:
        if size > self.max_bytes:
            self.release()
            raise AllocationFailure(f"output buffer limit exceeded ({size} > {self.max_bytes} bytes)")
        try:
            return bytearray(size)
        except MemoryError as exc:
            self.release()
            raise AllocationFailure(f"could not allocate {size} bytes") from exc

    def append(self, text: str) -> None:
        if self._data is None:
            raise AllocationFailure("output buffer was released")
        chunk = text.encode("utf-8", errors="surrogateescape")
        needed = self._length + len(chunk) + 1
        if needed > len(self._data):
            grown = self._allocate(max(needed, len(self._data)) * 2)
            grown[: self._length] = self._data[: self._length]
            self._data = grown
        end = self._length + len(chunk)
        self._data[self._length:end] = chunk
        self._data[end] = _SENTINEL
        self._length = end

    def getvalue(self) -> bytes:
        if self._data is None:
            raise AllocationFailure("output buffer was released")
        return bytes(self._data[: self._length])

    def release(self) -> None:
        self._data = None
        self._length = 0
