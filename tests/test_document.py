import json

import pytest

from fakes import make_sample
from snrwatch.errors import AllocationFailure
from snrwatch.render.document import (
    END_MARKER,
    START_MARKER,
    escape_text,
    int_to_text,
    render_base_document,
    render_monitor_document,
)
from snrwatch.sampling.buffer import SampleBuffer
from snrwatch.sampling.aggregate import compute_average

_REVERSE = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


def _unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            out.append(_REVERSE[next(chars)])
        else:
            out.append(ch)
    return "".join(out)


def _extract(doc: bytes) -> dict:
    text = doc.decode("utf-8")
    body = text.split(START_MARKER + "\n", 1)[1].split(END_MARKER, 1)[0]
    return json.loads(body)


def test_escape_removes_raw_special_characters_and_reverses() -> None:
    original = 'say "hi"\\path\nnext\tcol\rend'
    escaped = escape_text(original)
    for raw in ("\n", "\t", "\r"):
        assert raw not in escaped
    stripped = escaped.replace("\\\\", "").replace('\\"', "")
    assert '"' not in stripped
    assert "\\" not in stripped.replace("\\n", "").replace("\\t", "").replace("\\r", "")
    assert _unescape(escaped) == original


def test_escape_passes_other_control_bytes_through() -> None:
    assert escape_text("a\x01b\x7f") == "a\x01b\x7f"
    assert escape_text("plain") == "plain"


def test_int_to_text_matches_decimal_rendering() -> None:
    assert int_to_text(0) == "0"
    assert int_to_text(-45) == "-45"
    assert int_to_text(5_180_000) == "5180000"
    for value in range(-1005, 1005, 37):
        assert int_to_text(value) == str(value)


def test_monitor_document_layout_is_exact() -> None:
    doc = render_monitor_document([make_sample(-52, 84, ts=100)])
    expected = (
        "\n[JSON_START]\n"
        "{\n"
        '  "collection_type": "monitor",\n'
        '  "samples": [\n'
        "    {\n"
        '      "timestamp_ms": 100,\n'
        '      "signal_strength_dbm": -52,\n'
        '      "link_quality": 84,\n'
        '      "snr_db": 32,\n'
        '      "noise_floor_dbm": -84,\n'
        '      "ssid": "lab",\n'
        '      "frequency_khz": 5180000,\n'
        '      "channel": 36\n'
        "    }\n"
        "  ],\n"
        '  "total_samples": 1\n'
        "}\n"
        "[JSON_END]\n\n"
    )
    assert doc == expected.encode()


def test_monitor_document_parses_with_field_order() -> None:
    samples = [make_sample(-50 - i, 80, ts=i * 100, ssid='x"y\\z\n') for i in range(3)]
    parsed = _extract(render_monitor_document(samples))
    assert list(parsed) == ["collection_type", "samples", "total_samples"]
    assert parsed["total_samples"] == 3
    assert list(parsed["samples"][0]) == [
        "timestamp_ms",
        "signal_strength_dbm",
        "link_quality",
        "snr_db",
        "noise_floor_dbm",
        "ssid",
        "frequency_khz",
        "channel",
    ]
    assert parsed["samples"][2]["signal_strength_dbm"] == -52
    assert parsed["samples"][1]["ssid"] == 'x"y\\z\n'


def test_base_document_field_order() -> None:
    buf = SampleBuffer(2)
    buf.append(make_sample(-50, 84, ssid="office\t5G"))
    buf.append(make_sample(-60, 70))
    parsed = _extract(render_base_document(compute_average(buf)))
    assert list(parsed) == [
        "collection_type",
        "ssid",
        "sample_count",
        "frequency_khz",
        "channel",
        "signal_strength_dbm",
        "link_quality",
        "snr_db",
        "noise_floor_dbm",
        "signal_percent",
        "noise_percent",
    ]
    assert parsed["collection_type"] == "base"
    assert parsed["ssid"] == "office\t5G"
    assert parsed["sample_count"] == 2
    assert parsed["signal_strength_dbm"] == -55


def test_document_too_large_for_limit_fails_without_output() -> None:
    with pytest.raises(AllocationFailure):
        render_monitor_document([make_sample()], max_bytes=512)
