"""Run controller: drive one sampling run and dispatch its results to the renderers."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from snrwatch.drivers.netsh import NetshSource
from snrwatch.drivers.wlanapi import HAVE_WLANAPI, WlanApiSource
from snrwatch.errors import AllocationFailure, EmptyResult, ProviderUnavailable
from snrwatch.io.modes import MODE_BASE, RunRequest
from snrwatch.render.document import END_MARKER, START_MARKER, render_base_document, render_monitor_document
from snrwatch.render.outbuf import DEFAULT_MAX_BYTES
from snrwatch.render.table import render_average_table, render_sample_table
from snrwatch.sampling.aggregate import compute_average
from snrwatch.sampling.sampler import collect_samples
from snrwatch.sampling.schedule import SAMPLE_INTERVAL_MS, PollSchedule
from snrwatch.util.logging import get_logger
from snrwatch.util.time import monotonic_ms

logger = get_logger(__name__)

PROVIDERS = ("auto", "wlanapi", "netsh")

STATUS_OK = "ok"
STATUS_UNAVAILABLE = "unavailable"
STATUS_EMPTY = "empty"
STATUS_ALLOCATION_FAILURE = "allocation_failure"


def select_source(provider: str = "auto", command: Optional[str] = None):
    """Build the signal source for a run; one source serves the whole run."""
    if provider not in PROVIDERS:
        raise ValueError(f"unknown provider '{provider}'")
    if provider == "wlanapi" or (provider == "auto" and HAVE_WLANAPI and not command):
        if not HAVE_WLANAPI:
            raise ProviderUnavailable("native WLAN API not available on this platform")
        return WlanApiSource()
    return NetshSource(command)


def _print_stdout(text: str) -> None:
    print(text, flush=True)


def _print_stderr(text: str) -> None:
    print(text, file=sys.stderr, flush=True)


def _write_stdout_bytes(data: bytes) -> None:
    sys.stdout.flush()
    stream = getattr(sys.stdout, "buffer", None)
    if stream is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
    else:
        stream.write(data)
    sys.stdout.flush()


@dataclass(frozen=True)
class RunOutcome:
    status: str
    mode: str
    duration_s: int
    sample_count: int = 0
    documents_emitted: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


class RunController:
    """Bind a signal source to the sampling loop and both renderers."""

    def __init__(
        self,
        source,
        *,
        interval_ms: int = SAMPLE_INTERVAL_MS,
        preflight: bool = True,
        max_output_bytes: int = DEFAULT_MAX_BYTES,
        say: Callable[[str], None] = _print_stdout,
        warn: Callable[[str], None] = _print_stderr,
        emit: Callable[[bytes], None] = _write_stdout_bytes,
        clock: Callable[[], int] = monotonic_ms,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source
        self.interval_ms = interval_ms
        self.preflight = preflight
        self.max_output_bytes = max_output_bytes
        self.say = say
        self.warn = warn
        self.emit = emit
        self.clock = clock
        self.sleep = sleep

    @property
    def device(self) -> str:
        return getattr(self.source, "device", type(self.source).__name__)

    def run(self, request: RunRequest) -> RunOutcome:
        self.say("\n=== WiFi Signal Strength & SNR Monitor ===")
        self.say(f"Signal source: {self.device}\n")
        logger.debug(
            "run start mode=%s duration=%ds",
            request.mode,
            request.duration_s,
            extra={"mode": request.mode, "provider": self.device},
        )

        schedule = PollSchedule(request.duration_s, self.interval_ms)
        try:
            if self.preflight and not self.source.probe():
                msg = "No Wi-Fi adapter detected or Wi-Fi is disabled"
                self.warn(f"[-] {msg}")
                return RunOutcome(STATUS_UNAVAILABLE, request.mode, request.duration_s, message=msg)
            if request.mode == MODE_BASE:
                return self._run_base(request, schedule)
            return self._run_monitor(request, schedule)
        finally:
            close = getattr(self.source, "close", None)
            if close is not None:
                close()

    def _collect(self, schedule: PollSchedule):
        return collect_samples(self.source, schedule, clock=self.clock, sleep=self.sleep)

    def _run_base(self, request: RunRequest, schedule: PollSchedule) -> RunOutcome:
        self.say(f"[*] Mode: Base ({self.device} over {schedule.duration_s} seconds)\n")
        try:
            buffer, _ = self._collect(schedule)
        except EmptyResult as exc:
            logger.debug("base capture empty: %s", exc, extra={"mode": request.mode, "error_type": "empty"})
            self.warn("[-] Failed to capture base signal data")
            self.say("\n[*] Base capture complete")
            return RunOutcome(STATUS_EMPTY, request.mode, request.duration_s, message=str(exc))

        avg = compute_average(buffer)
        emitted, failure = self._render_and_emit(
            [
                ("display", lambda: render_average_table(avg, source=self.device, max_bytes=self.max_output_bytes)),
                ("document", lambda: render_base_document(avg, max_bytes=self.max_output_bytes)),
            ]
        )
        self.say("\n[*] Base capture complete")
        return self._outcome(request, len(buffer), emitted, failure)

    def _run_monitor(self, request: RunRequest, schedule: PollSchedule) -> RunOutcome:
        self.say(f"[*] Starting {schedule.duration_s}-second WiFi signal collection ({self.device})...")
        self.say(f"[*] Sample interval: {schedule.interval_ms} ms")
        self.say(f"[*] Target samples: {schedule.capacity}\n")
        try:
            buffer, stats = self._collect(schedule)
        except EmptyResult as exc:
            logger.debug("monitor run empty: %s", exc, extra={"mode": request.mode, "error_type": "empty"})
            self.warn("[-] Failed to collect WiFi signal strength data")
            self.say("[*] Note: WiFi adapter may not be available or not connected")
            self.say("\n[*] Monitoring complete")
            return RunOutcome(STATUS_EMPTY, request.mode, request.duration_s, message=str(exc))

        count = len(buffer)
        self.say("\n[+] Collection complete")
        self.say(f"[+] Collected {count} samples in {stats.elapsed_ms} ms")
        self.say(f"[+] Actual sample rate: ~{stats.elapsed_ms // count} ms\n")

        note = getattr(self.source, "note", None)
        emitted, failure = self._render_and_emit(
            [
                (
                    "display",
                    lambda: render_sample_table(
                        buffer, schedule.duration_s, source=self.device, note=note, max_bytes=self.max_output_bytes
                    ),
                ),
                ("document", lambda: render_monitor_document(buffer, max_bytes=self.max_output_bytes)),
            ]
        )
        self.say("\n[*] Monitoring complete")
        return self._outcome(request, count, emitted, failure)

    def _render_and_emit(self, renderers: List[Tuple[str, Callable[[], bytes]]]) -> Tuple[int, Optional[str]]:
        """Render each output fully before emitting it; a failed render emits nothing."""
        documents = 0
        failure = None
        for kind, render in renderers:
            try:
                data = render()
            except AllocationFailure as exc:
                logger.debug("%s render aborted: %s", kind, exc, extra={"error_type": "allocation"})
                self.warn(f"[-] Failed to allocate {kind} buffer: {exc}")
                failure = str(exc)
                continue
            self.emit(data)
            if kind == "document":
                documents += 1
                self.say(f"[+] JSON data emitted ({len(data)} bytes)")
                self.say(f"[*] Copy JSON between {START_MARKER} and {END_MARKER} markers")
        return documents, failure

    @staticmethod
    def _outcome(request: RunRequest, count: int, documents: int, failure: Optional[str]) -> RunOutcome:
        if failure is not None:
            return RunOutcome(
                STATUS_ALLOCATION_FAILURE, request.mode, request.duration_s, count, documents, message=failure
            )
        return RunOutcome(STATUS_OK, request.mode, request.duration_s, count, documents)
