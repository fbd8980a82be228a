import functools
import json

import pytest

from fakes import FakeClock, StaticSource
from snrwatch import cli
from snrwatch.errors import ProviderUnavailable
from snrwatch.io.modes import RunRequest, default_mode_profiles, parse_run_request
from snrwatch.run.controller import RunController
from snrwatch.util.exit_codes import ExitCode
from snrwatch.util.logging import configure_logging


@pytest.mark.parametrize(
    "text, expected, notices",
    [
        ("", RunRequest("monitor", 5), 0),
        (None, RunRequest("monitor", 5), 0),
        ("base", RunRequest("base", 3), 0),
        ("BASE 10", RunRequest("base", 10), 0),
        ("monitor 60", RunRequest("monitor", 60), 0),
        ("monitor 61", RunRequest("monitor", 5), 1),
        ("base 0", RunRequest("base", 3), 1),
        ("base soon", RunRequest("base", 3), 0),
        ("scan 10", RunRequest("monitor", 5), 1),
        ("basement", RunRequest("monitor", 5), 1),
    ],
)
def test_parse_run_request(text, expected, notices) -> None:
    request, messages = parse_run_request(text)
    assert request == expected
    assert len(messages) == notices


def test_out_of_range_notice_names_mode_default() -> None:
    _, messages = parse_run_request("base 99")
    assert messages == ["[*] Invalid duration, using default: 3 seconds"]


def test_profiles_cover_both_modes() -> None:
    profiles = default_mode_profiles()
    assert sorted(profiles) == ["base", "monitor"]
    assert profiles["base"].default_duration_s == 3
    assert profiles["monitor"].max_duration_s == 60


def test_parse_args_defaults(monkeypatch) -> None:
    monkeypatch.delenv("SNRWATCH_PROVIDER", raising=False)
    monkeypatch.delenv("SNRWATCH_COMMAND", raising=False)
    args = cli.parse_args([])
    assert args.request == []
    assert args.provider == "auto"
    assert args.command is None
    assert args.skip_preflight is False
    assert args.list_modes is False


def test_parse_args_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("SNRWATCH_PROVIDER", "netsh")
    monkeypatch.setenv("SNRWATCH_COMMAND", "cat report.txt")
    args = cli.parse_args(["base", "4"])
    assert args.request == ["base", "4"]
    assert args.provider == "netsh"
    assert args.command == "cat report.txt"


def test_flags_override_environment(monkeypatch) -> None:
    monkeypatch.setenv("SNRWATCH_PROVIDER", "netsh")
    args = cli.parse_args(["--provider", "auto", "--skip-preflight"])
    assert args.provider == "auto"
    assert args.skip_preflight is True


def test_bad_provider_environment_is_usage_error(monkeypatch) -> None:
    monkeypatch.setenv("SNRWATCH_PROVIDER", "bluetooth")
    with pytest.raises(SystemExit) as exc:
        cli.parse_args([])
    assert exc.value.code == ExitCode.INVALID_ARGS


def test_command_with_native_provider_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("SNRWATCH_PROVIDER", raising=False)
    with pytest.raises(SystemExit):
        cli.parse_args(["--provider", "wlanapi", "--command", "netsh wlan show interfaces"])


def test_list_modes_prints_profiles(capsys) -> None:
    assert cli.main(["--list-modes"]) == ExitCode.SUCCESS
    names = [p["name"] for p in json.loads(capsys.readouterr().out)]
    assert names == ["base", "monitor"]


def _patch_run(monkeypatch, source):
    clock = FakeClock()
    emitted = []
    monkeypatch.setattr(cli, "select_source", lambda provider, command: source)
    monkeypatch.setattr(
        cli,
        "RunController",
        functools.partial(RunController, clock=clock, sleep=clock.sleep, emit=emitted.append),
    )
    return emitted


def test_main_success_exit_code(monkeypatch) -> None:
    emitted = _patch_run(monkeypatch, StaticSource())
    assert cli.main(["monitor", "1"]) == ExitCode.SUCCESS
    assert len(emitted) == 2


def test_main_empty_run_exit_code(monkeypatch) -> None:
    emitted = _patch_run(monkeypatch, StaticSource(fail=True))
    assert cli.main(["base", "1"]) == ExitCode.EMPTY_RESULT
    assert emitted == []


def test_main_missing_adapter_exit_code(monkeypatch) -> None:
    _patch_run(monkeypatch, StaticSource(probe_ok=False))
    assert cli.main(["base"]) == ExitCode.PROVIDER_UNAVAILABLE


def test_main_unavailable_provider_exit_code(monkeypatch, capsys) -> None:
    def unavailable(provider, command):
        raise ProviderUnavailable("native WLAN API not available on this platform")

    monkeypatch.setattr(cli, "select_source", unavailable)
    assert cli.main(["--provider", "wlanapi"]) == ExitCode.PROVIDER_UNAVAILABLE
    assert "native WLAN API" in capsys.readouterr().err


def test_invalid_mode_notice_is_printed(monkeypatch, capsys) -> None:
    _patch_run(monkeypatch, StaticSource())
    assert cli.main(["scan", "2"]) == ExitCode.SUCCESS
    assert "[*] No valid mode specified, using default: monitor mode" in capsys.readouterr().out


def test_run_finished_record_names_exit_code(monkeypatch, tmp_path) -> None:
    _patch_run(monkeypatch, StaticSource(fail=True))
    log_path = tmp_path / "run.jsonl"
    code = cli.main(["--log-level", "INFO", "--log-json", str(log_path), "base", "1"])
    configure_logging()

    assert code == ExitCode.EMPTY_RESULT
    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    finished = [r for r in records if r["message"].startswith("run finished")]
    assert len(finished) == 1
    assert finished[0]["message"] == "run finished: No samples collected"
    assert finished[0]["exit_code"] == ExitCode.EMPTY_RESULT
    assert finished[0]["mode"] == "base"
    assert finished[0]["sample_count"] == 0


def test_exit_code_messages() -> None:
    assert ExitCode.message(ExitCode.SUCCESS) == "Success"
    assert ExitCode.message(ExitCode.ALLOCATION_FAILURE) == "Output buffer allocation failed"
    assert ExitCode.message(42) == "Unknown exit code 42"
