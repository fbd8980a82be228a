"""Diagnostic logging for SNRwatch runs.

Operator-facing progress lines are printed to stdout by the run controller.
This logger carries diagnostics only: a plain stderr console handler and an
optional JSON-lines file that records the run fields passed via ``extra``.

    configure_logging(level="DEBUG", json_file="snrwatch.jsonl")
    logger = get_logger(__name__)
    logger.debug("poll skipped", extra={"reason": "adapter offline"})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "snrwatch"
DEFAULT_LEVEL = "WARNING"

# Fields the controller, sampler and CLI attach to records.
RUN_FIELDS = ("mode", "provider", "sample_count", "error_type", "duration_ms", "reason", "exit_code")

_configured = False


class RunRecordFormatter(logging.Formatter):
    """One JSON object per record, with whichever run fields the record carries."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in RUN_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _level_from_env() -> str:
    if os.environ.get("SNRWATCH_DEBUG", "").strip().lower() in ("1", "true", "yes"):
        return "DEBUG"
    return os.environ.get("SNRWATCH_LOG_LEVEL", DEFAULT_LEVEL)


def configure_logging(*, level: Optional[str] = None, json_file: Optional[str] = None) -> None:
    """(Re)install the snrwatch handlers.

    ``level`` falls back to SNRWATCH_DEBUG / SNRWATCH_LOG_LEVEL, then WARNING.
    A JSON file that cannot be opened is reported and skipped.
    """
    global _configured

    numeric_level = getattr(logging, (level or _level_from_env()).upper(), logging.WARNING)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s", "%H:%M:%S"))
    logger.addHandler(console)

    if json_file:
        try:
            records = logging.FileHandler(json_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("cannot open JSON log %s: %s", json_file, exc)
        else:
            records.setFormatter(RunRecordFormatter())
            logger.addHandler(records)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``snrwatch`` namespace, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    if name == "__main__":
        name = "main"
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, message: str, *, error_type: Optional[str] = None, **extra: Any) -> None:
    """Log the exception being handled, tagged with ``error_type`` and run fields."""
    if error_type:
        extra["error_type"] = error_type
    logger.exception(message, extra=extra)
