"""
Logging setup for bfcm-report.

``configure_logging(config)`` runs once, from the CLI, before any source is
fetched.  Library modules only call ``logging.getLogger(__name__)``.

Console output goes to stderr because stdout carries the report itself, so
``bfcm-report generate ... > report.txt`` captures nothing but the report.

With ``json_format = true`` every record becomes one JSON line.  Fields passed
through ``extra=`` (the pipeline adds ``shops`` and ``window``) sit at the top
level next to the fixed keys::

    {"ts": "2025-12-02T15:00:00Z", "level": "WARNING",
     "logger": "bfcm_report.pipeline.orchestrator", "msg": "...", "shops": "12345"}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bfcm_report.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg`` and extras."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line: dict[str, Any] = {
            "ts": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith("_")
        )
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def _formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime  # UTC, matching the Z suffix
    return formatter


def configure_logging(config: "LoggingConfig") -> None:
    """Install a stderr handler (plus an optional file handler) on the root logger.

    Args:
        config: ``AppConfig.logging``.  ``level`` is already upper-cased by
            validation.  When ``log_file`` is set its parent directories are
            created.
    """
    level = logging.getLevelName(config.level)
    formatter = _formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
