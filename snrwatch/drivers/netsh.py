"""Signal source backed by parsing ``netsh wlan show interfaces`` output."""

from __future__ import annotations

import shlex
import subprocess
from typing import Dict, List, Optional, Sequence, Union

from snrwatch.dsp.estimation import estimate_snr_fixed_noise, percent_to_dbm
from snrwatch.errors import ProviderUnavailable
from snrwatch.sampling.types import MAX_SSID_BYTES, Sample
from snrwatch.util.duration import leading_int

DEFAULT_COMMAND = ("netsh", "wlan", "show", "interfaces")
DRIVERS_COMMAND = ("netsh", "wlan", "show", "drivers")
HIDDEN_SSID = "Hidden/Unknown"
COMMAND_TIMEOUT_S = 5.0


def parse_fields(output: str) -> Dict[str, str]:
    """Collect ``key : value`` lines, keeping the first occurrence of each key."""
    fields: Dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if key and key not in fields:
            fields[key] = value.strip()
    return fields


def parse_interface_report(output: str) -> Sample:
    """Build a sample from one interface report.

    The report only carries a signal percentage. RSSI is the linear percent
    approximation and SNR is measured against a fixed -95 dBm noise floor.
    Link quality and channel frequency cannot be told apart from that single
    value, so both are reported as 0 (unavailable).
    """
    fields = parse_fields(output)
    state = fields.get("State", "").lower()
    if state != "connected":
        raise ProviderUnavailable(f"adapter not connected (state={state or 'unknown'})")

    ssid = fields.get("SSID") or HIDDEN_SSID
    ssid = ssid.encode("utf-8", errors="surrogateescape")[:MAX_SSID_BYTES].decode("utf-8", errors="surrogateescape")

    percent = leading_int(fields.get("Signal"))
    signal_dbm = percent_to_dbm(percent or 0)
    snr, noise = estimate_snr_fixed_noise(signal_dbm)
    return Sample(
        timestamp_ms=0,
        signal_strength_dbm=signal_dbm,
        link_quality=0,
        snr_db=snr,
        noise_floor_dbm=noise,
        ssid=ssid,
        frequency_khz=0,
        channel=0,
    )


class NetshSource:
    """Poll the WLAN state through an external diagnostic command."""

    device = "netsh signal estimate"
    note = "RSSI approximated from the reported signal percentage"

    def __init__(self, command: Optional[Union[str, Sequence[str]]] = None, *, timeout: float = COMMAND_TIMEOUT_S):
        if command is None:
            self.command: List[str] = list(DEFAULT_COMMAND)
        elif isinstance(command, str):
            self.command = shlex.split(command)
        else:
            self.command = list(command)
        self.timeout = timeout

    def _run(self, argv: Sequence[str]) -> str:
        try:
            proc = subprocess.run(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ProviderUnavailable(f"{argv[0]} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise ProviderUnavailable(f"{argv[0]} timed out after {self.timeout:.1f}s") from exc
        except OSError as exc:
            raise ProviderUnavailable(f"{argv[0]} failed: {exc}") from exc
        if proc.returncode != 0:
            raise ProviderUnavailable(f"{argv[0]} exited with status {proc.returncode}")
        return proc.stdout.decode("utf-8", errors="surrogateescape")

    def query(self) -> Sample:
        return parse_interface_report(self._run(self.command))

    def probe(self) -> bool:
        """Return True when the driver report lists a Wi-Fi radio."""
        try:
            report = self._run(DRIVERS_COMMAND)
        except ProviderUnavailable:
            return False
        return "Radio types supported" in report or "802.11" in report

    def close(self) -> None:
        pass
