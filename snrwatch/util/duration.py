"""Duration parsing helpers for run requests."""

from __future__ import annotations

from typing import Optional, Tuple

MIN_DURATION_SEC = 1
MAX_DURATION_SEC = 60


def leading_int(text: Optional[str]) -> Optional[int]:
    """Return the integer spelled by the leading ASCII digits of ``text``.

    Returns None when ``text`` does not start with a digit, so signs and
    suffixes are never interpreted.
    """
    if not text:
        return None
    digits = []
    for ch in text:
        if "0" <= ch <= "9":
            digits.append(ch)
        else:
            break
    if not digits:
        return None
    return int("".join(digits))


def resolve_duration(raw: Optional[str], default: int) -> Tuple[int, bool]:
    """Resolve a requested duration in seconds.

    Returns ``(seconds, corrected)``. A missing or non-numeric request yields
    the default silently; a numeric request outside 1..60 yields the default
    with ``corrected`` set so the caller can print a notice.
    """
    value = leading_int(raw)
    if value is None:
        return default, False
    if value < MIN_DURATION_SEC or value > MAX_DURATION_SEC:
        return default, True
    return value, False
