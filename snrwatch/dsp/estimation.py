"""Signal metric estimation helpers.

The WLAN stack reports RSSI and a link-quality percentage but never a noise
floor. SNR is therefore estimated from link quality with an empirical
piecewise-linear table and the noise floor is back-derived as
``signal - snr``. These are heuristics, not measurements.
"""

from __future__ import annotations

from typing import Tuple

# (band floor, SNR at band floor) for link quality, highest band first
SNR_BANDS: Tuple[Tuple[int, int], ...] = (
    (90, 35),
    (80, 30),
    (70, 25),
    (60, 20),
    (50, 15),
    (40, 10),
)

DBM_CEILING = -30
DBM_FLOOR = -100
ASSUMED_NOISE_FLOOR_DBM = -95


def _trunc_div(num: int, den: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(num) // abs(den)
    return -q if (num < 0) != (den < 0) else q


def estimate_snr(link_quality: int, signal_dbm: int) -> Tuple[int, int]:
    """Estimate ``(snr_db, noise_floor_dbm)`` from link quality and RSSI.

    Each band adds half a dB per quality point above its floor; below the
    lowest band SNR scales linearly from 0 at quality 0 to 10 at quality 40.
    """
    for floor, base in SNR_BANDS:
        if link_quality >= floor:
            snr = base + _trunc_div(link_quality - floor, 2)
            break
    else:
        snr = _trunc_div(link_quality * 10, 40)
    return snr, signal_dbm - snr


def estimate_snr_fixed_noise(signal_dbm: int) -> Tuple[int, int]:
    """Estimate ``(snr_db, noise_floor_dbm)`` against an assumed -95 dBm floor.

    Used where no link quality is available. This is a different heuristic
    from :func:`estimate_snr` and the two are kept apart.
    """
    return signal_dbm - ASSUMED_NOISE_FLOOR_DBM, ASSUMED_NOISE_FLOOR_DBM


def dbm_to_percent(dbm: int) -> int:
    """Map dBm onto 0..100, saturating at -30 dBm and -100 dBm."""
    if dbm >= DBM_CEILING:
        return 100
    if dbm <= DBM_FLOOR:
        return 0
    percent = ((dbm + 100) * 100) // 70
    return max(0, min(100, percent))


def percent_to_dbm(percent: int) -> int:
    """Approximate dBm from a signal percentage reported by ``netsh``.

    This is a separate linear model (``percent / 2 - 100``) and is not the
    inverse of :func:`dbm_to_percent`.
    """
    if percent >= 100:
        return DBM_CEILING
    if percent <= 0:
        return DBM_FLOOR
    return int(percent / 2.0 - 100.0)


def frequency_to_channel(freq_khz: int) -> int:
    """Return the IEEE 802.11 channel for a center frequency, or 0 if unmapped."""
    freq_mhz = int(freq_khz) // 1000

    if 2412 <= freq_mhz <= 2484:
        if freq_mhz == 2484:
            return 14
        return (freq_mhz - 2407) // 5

    if 5170 <= freq_mhz <= 5825:
        return (freq_mhz - 5000) // 5

    return 0


def signal_quality_label(percent: int) -> Tuple[str, str, str]:
    """Return ``(marker, grade, proximity hint)`` for a signal percentage."""
    if percent >= 85:
        return "+", "Excellent", "Very close"
    if percent >= 70:
        return "+", "Good", "Close proximity"
    if percent >= 50:
        return "~", "Fair", "Medium distance"
    if percent >= 30:
        return "-", "Poor", "Far distance"
    return "!", "Very Poor", "Very far"
