# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for ptexamples.

Every example prints its progress through this logger instead of print().
Each record becomes one JSON line that is timestamped, leveled, and tagged
with the source module, so a training run can be grepped or piped into jq.

Layout:
  - Python's standard `logging` module does the routing; JsonFormatter turns
    each record into a single JSON line.
  - One handler writes to stdout; a second one writes to a file when asked.
  - `get_logger` is the factory every module uses at import time.

One record per line, for example:
  {"ts": "2026-...", "level": "INFO", "module": "ptexamples.training.engine.core",
   "msg": "Training progress", "epoch": 1, "batch": 200, "accuracy": 0.71}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    Anything passed through the `extra` kwarg is merged in as additional
    context (epoch, batch, accuracy, learning rate and so on). Exceptions
    logged with exc_info=True land in an "exc" field.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _resolve_log_level(level_name: str) -> int:
    """Map a level name such as "info" to its logging constant."""
    name = level_name.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Invalid log level '{level_name}'. Expected one of {', '.join(LOG_LEVELS)}")
    return int(getattr(logging, name))


def _add_handler(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Return the JSON logger called `name`, creating its handlers on first use.

    Every module calls this at import time with its own __name__. Later calls
    for the same name only adjust the level; handlers are never duplicated.

    Args:
        name: Dotted logger name.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_file: Also append JSON lines to this file (first call only).
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    _add_handler(logger, logging.StreamHandler(stream=sys.stdout), level)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _add_handler(logger, logging.FileHandler(str(log_file), encoding="utf-8"), level)

    # Records stop here; the root logger would print them a second time.
    logger.propagate = False
    return logger


def set_log_level(level_name: str) -> None:
    """
    Re-level every ptexamples logger that already exists.

    Module-level loggers are created at import time with the default level,
    before the CLI has parsed --log-level. Bootstrap calls this to apply the
    requested level to all of them at once.
    """
    level = _resolve_log_level(level_name)
    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        # PlaceHolder entries stand for parent packages with no logger of their own
        if not name.startswith("ptexamples") or not isinstance(existing, logging.Logger):
            continue
        existing.setLevel(level)
        for handler in existing.handlers:
            handler.setLevel(level)
