"""Clock utilities shared across SNRwatch components."""

from __future__ import annotations

import time


def monotonic_ms() -> int:
    """Return a monotonic millisecond counter suitable for elapsed-time math."""
    return int(time.monotonic() * 1000)
