import pytest

from snrwatch.drivers.netsh import HIDDEN_SSID, NetshSource, parse_fields, parse_interface_report
from snrwatch.errors import ProviderUnavailable

REPORT = """
There is 1 interface on the system:

    Name                   : Wi-Fi
    Description            : Intel(R) Wi-Fi 6 AX201 160MHz
    Physical address       : aa:bb:cc:dd:ee:ff
    State                  : connected
    SSID                   : HomeLab
    BSSID                  : 11:22:33:44:55:66
    Network type           : Infrastructure
    Radio type             : 802.11ax
    Channel                : 36
    Signal                 : 80%
    Profile                : HomeLab

    Hosted network status  : Not available
"""

DISCONNECTED = """
    Name                   : Wi-Fi
    State                  : disconnected
    Radio status           : Hardware On
"""

DRIVERS = """
    Driver                    : Intel(R) Wi-Fi 6 AX201 160MHz
    Radio types supported     : 802.11b 802.11g 802.11n 802.11a 802.11ac 802.11ax
"""


def test_parse_fields_keeps_first_value_and_colons_in_values() -> None:
    fields = parse_fields(REPORT)
    assert fields["SSID"] == "HomeLab"
    assert fields["BSSID"] == "11:22:33:44:55:66"
    assert fields["Physical address"] == "aa:bb:cc:dd:ee:ff"


def test_connected_report_uses_fixed_noise_floor() -> None:
    sample = parse_interface_report(REPORT)
    assert sample.ssid == "HomeLab"
    assert sample.signal_strength_dbm == -60
    assert sample.snr_db == 35
    assert sample.noise_floor_dbm == -95
    assert sample.link_quality == 0
    assert sample.frequency_khz == 0
    assert sample.channel == 0


def test_signal_percent_never_becomes_link_quality() -> None:
    sample = parse_interface_report("State : connected\nSSID : lab\nSignal : 85%\n")
    assert sample.signal_strength_dbm == -57
    assert sample.snr_db == sample.signal_strength_dbm + 95 == 38
    assert sample.noise_floor_dbm == -95
    assert sample.link_quality == 0


def test_disconnected_report_is_unavailable() -> None:
    with pytest.raises(ProviderUnavailable):
        parse_interface_report(DISCONNECTED)


def test_missing_ssid_and_signal_use_defaults() -> None:
    sample = parse_interface_report("    State : Connected\n")
    assert sample.ssid == HIDDEN_SSID
    assert sample.signal_strength_dbm == -100
    assert sample.link_quality == 0
    assert sample.noise_floor_dbm == sample.signal_strength_dbm - sample.snr_db


def test_full_signal_clamps_to_ceiling() -> None:
    sample = parse_interface_report("State : connected\nSSID : x\nSignal : 100%\n")
    assert sample.signal_strength_dbm == -30
    assert sample.snr_db == 65
    assert sample.link_quality == 0


def test_source_runs_command_and_parses(monkeypatch) -> None:
    src = NetshSource()
    calls = []

    def fake_run(argv):
        calls.append(list(argv))
        return DRIVERS if "drivers" in argv else REPORT

    monkeypatch.setattr(src, "_run", fake_run)
    assert src.query().ssid == "HomeLab"
    assert src.probe() is True
    assert calls == [["netsh", "wlan", "show", "interfaces"], ["netsh", "wlan", "show", "drivers"]]


def test_probe_is_false_when_command_unavailable(monkeypatch) -> None:
    src = NetshSource()

    def fake_run(argv):
        raise ProviderUnavailable("netsh not found")

    monkeypatch.setattr(src, "_run", fake_run)
    assert src.probe() is False


def test_missing_command_is_unavailable() -> None:
    src = NetshSource(["snrwatch-no-such-command-xyz"])
    with pytest.raises(ProviderUnavailable):
        src.query()


def test_command_string_is_split() -> None:
    assert NetshSource("netsh wlan show interfaces").command == ["netsh", "wlan", "show", "interfaces"]
