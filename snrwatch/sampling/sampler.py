"""Timed polling loop that fills a sample buffer from a signal source."""

from __future__ import annotations

import dataclasses
import time
from typing import Callable, Tuple

from snrwatch.errors import EmptyResult, ProviderUnavailable
from snrwatch.sampling.buffer import SampleBuffer
from snrwatch.sampling.schedule import PollSchedule
from snrwatch.sampling.types import CollectionStats
from snrwatch.util.logging import get_logger
from snrwatch.util.time import monotonic_ms

logger = get_logger(__name__)


def collect_samples(
    source,
    schedule: PollSchedule,
    *,
    clock: Callable[[], int] = monotonic_ms,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[SampleBuffer, CollectionStats]:
    """Poll ``source`` every interval until the duration elapses or the buffer fills.

    A tick whose query raises ProviderUnavailable is skipped but still sleeps
    a full interval. Raises EmptyResult when no tick succeeded.
    """
    buffer = SampleBuffer(schedule.capacity)
    polls = 0
    failed = 0
    start = clock()

    while len(buffer) < buffer.capacity:
        if clock() - start >= schedule.duration_ms:
            break
        polls += 1
        try:
            sample = source.query()
        except ProviderUnavailable as exc:
            failed += 1
            logger.debug("poll %d skipped: %s", polls, exc, extra={"reason": str(exc)})
        else:
            buffer.append(dataclasses.replace(sample, timestamp_ms=clock() - start))
        sleep(schedule.interval_s)

    stats = CollectionStats(elapsed_ms=clock() - start, polls=polls, failed_polls=failed)
    logger.debug(
        "collected %d/%d samples in %d ms (%d failed polls)",
        len(buffer),
        buffer.capacity,
        stats.elapsed_ms,
        failed,
        extra={"sample_count": len(buffer), "duration_ms": stats.elapsed_ms},
    )
    if not buffer:
        raise EmptyResult(f"no samples collected in {schedule.duration_s} s ({polls} polls)")
    return buffer, stats
