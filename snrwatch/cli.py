#!/usr/bin/env python3
"""SNRwatch CLI entrypoint (package module)."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, List, Optional, Set

from snrwatch.errors import ProviderUnavailable
from snrwatch.io.modes import parse_run_request, serialize_profiles
from snrwatch.run.controller import (
    PROVIDERS,
    STATUS_ALLOCATION_FAILURE,
    STATUS_EMPTY,
    STATUS_OK,
    STATUS_UNAVAILABLE,
    RunController,
    select_source,
)
from snrwatch.util.exit_codes import ExitCode
from snrwatch.util.logging import configure_logging, get_logger, log_exception

_STATUS_EXIT_CODES = {
    STATUS_OK: ExitCode.SUCCESS,
    STATUS_UNAVAILABLE: ExitCode.PROVIDER_UNAVAILABLE,
    STATUS_EMPTY: ExitCode.EMPTY_RESULT,
    STATUS_ALLOCATION_FAILURE: ExitCode.ALLOCATION_FAILURE,
}


def _str_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    return value.strip()


def run(args: argparse.Namespace) -> int:
    """Top-level CLI dispatcher; returns the process exit code."""
    if args.list_modes:
        _emit_modes_json()
        return ExitCode.SUCCESS

    logger = get_logger(__name__)
    request, notices = parse_run_request(" ".join(args.request))
    for notice in notices:
        print(notice, flush=True)

    try:
        source = select_source(args.provider, args.command)
    except ProviderUnavailable as exc:
        print(f"[-] {exc}", file=sys.stderr, flush=True)
        return ExitCode.PROVIDER_UNAVAILABLE

    controller = RunController(source, preflight=not args.skip_preflight)
    try:
        outcome = controller.run(request)
    except KeyboardInterrupt:
        print("\n[-] Interrupted", file=sys.stderr, flush=True)
        return ExitCode.GENERAL_ERROR
    except Exception:
        log_exception(logger, "run failed", error_type="run", mode=request.mode)
        return ExitCode.GENERAL_ERROR

    code = _STATUS_EXIT_CODES.get(outcome.status, ExitCode.GENERAL_ERROR)
    logger.info(
        "run finished: %s",
        ExitCode.message(code),
        extra={"mode": outcome.mode, "sample_count": outcome.sample_count, "exit_code": code},
    )
    return code


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        description="Sample Wi-Fi RSSI, link quality and estimated SNR/noise for the associated network",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument(
        "request",
        nargs="*",
        default=[],
        help="Run mode and optional duration in seconds: 'base [1-60]' (default 3) or 'monitor [1-60]' (default 5)",
    )
    p.add_argument("--provider", choices=PROVIDERS, help="Signal source: native WLAN API, netsh parsing, or auto (default auto)")
    p.add_argument("--command", type=str, help="Override the interface report command used by the netsh provider")
    p.add_argument("--skip-preflight", dest="skip_preflight", action="store_true", help="Do not check for a Wi-Fi adapter before sampling")
    p.add_argument("--log-level", dest="log_level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Diagnostic log level (default WARNING)")
    p.add_argument("--log-json", dest="log_json", type=str, help="Append JSON-lines diagnostics to this file")
    p.add_argument("--list-modes", dest="list_modes", action="store_true", help="Print the run mode profiles as JSON and exit")

    args = p.parse_args(argv)
    args._cli_overrides = set()

    _set_default(args, args._cli_overrides, "provider", _str_env("SNRWATCH_PROVIDER", "auto"))
    _set_default(args, args._cli_overrides, "command", _str_env("SNRWATCH_COMMAND", None))
    _set_default(args, args._cli_overrides, "skip_preflight", False)
    _set_default(args, args._cli_overrides, "log_level", None)
    _set_default(args, args._cli_overrides, "log_json", None)
    _set_default(args, args._cli_overrides, "list_modes", False)

    if args.provider not in PROVIDERS:
        p.error(f"SNRWATCH_PROVIDER must be one of {', '.join(PROVIDERS)}")
    if "command" in args._cli_overrides and args.provider == "wlanapi":
        p.error("--command only applies to the netsh provider")

    if hasattr(args, "_cli_overrides"):
        delattr(args, "_cli_overrides")
    return args


def _set_default(args: argparse.Namespace, overrides: Set[str], attr: str, value: Any) -> None:
    if hasattr(args, attr):
        overrides.add(attr)
    else:
        setattr(args, attr, value)


def _emit_modes_json() -> None:
    print(json.dumps(serialize_profiles(), indent=2, sort_keys=True))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level, json_file=args.log_json)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
