"""Poll scheduling for a bounded observation window."""

from __future__ import annotations

from dataclasses import dataclass

SAMPLE_INTERVAL_MS = 100
MAX_SAMPLES = 600


@dataclass(frozen=True)
class PollSchedule:
    """Duration and interval of one sampling run."""

    duration_s: int
    interval_ms: int = SAMPLE_INTERVAL_MS

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if self.duration_s < 0:
            raise ValueError("duration_s must be >= 0")

    @property
    def duration_ms(self) -> int:
        return self.duration_s * 1000

    @property
    def capacity(self) -> int:
        """Maximum number of samples the run may hold."""
        return min(self.duration_ms // self.interval_ms, MAX_SAMPLES)

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0
