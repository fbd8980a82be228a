"""Run mode profiles and run-request parsing."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from snrwatch.util.duration import MAX_DURATION_SEC, MIN_DURATION_SEC, resolve_duration

MODE_BASE = "base"
MODE_MONITOR = "monitor"


@dataclass(frozen=True)
class ModeProfile:
    name: str
    default_duration_s: int
    description: str
    min_duration_s: int = MIN_DURATION_SEC
    max_duration_s: int = MAX_DURATION_SEC


@dataclass(frozen=True)
class RunRequest:
    mode: str
    duration_s: int


def default_mode_profiles() -> Dict[str, ModeProfile]:
    profiles = [
        ModeProfile(
            name=MODE_BASE,
            default_duration_s=3,
            description="Average BSS RSSI, quality, SNR and noise over the window",
        ),
        ModeProfile(
            name=MODE_MONITOR,
            default_duration_s=5,
            description="Report every 100 ms sample collected over the window",
        ),
    ]
    return {p.name: p for p in profiles}


def serialize_profiles() -> List[Dict[str, Any]]:
    return [asdict(p) for p in default_mode_profiles().values()]


def parse_run_request(text: Optional[str]) -> Tuple[RunRequest, List[str]]:
    """Parse ``"<mode> [duration]"`` into a run request plus operator notices.

    The mode keyword is case-insensitive. Empty input means monitor mode at
    its default duration; an unknown keyword does the same with a notice and
    ignores any duration. Out-of-range durations fall back to the mode's
    default with a notice.
    """
    profiles = default_mode_profiles()
    monitor = profiles[MODE_MONITOR]
    tokens = (text or "").split()
    if not tokens:
        return RunRequest(monitor.name, monitor.default_duration_s), []

    profile = profiles.get(tokens[0].lower())
    if profile is None:
        notice = "[*] No valid mode specified, using default: monitor mode"
        return RunRequest(monitor.name, monitor.default_duration_s), [notice]

    raw_duration = tokens[1] if len(tokens) > 1 else None
    duration, corrected = resolve_duration(raw_duration, profile.default_duration_s)
    notices = []
    if corrected:
        notices.append(f"[*] Invalid duration, using default: {profile.default_duration_s} seconds")
    return RunRequest(profile.name, duration), notices
