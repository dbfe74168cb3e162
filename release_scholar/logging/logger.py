# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for release-scholar.

Every log entry is a single JSON line: timestamped, leveled, and tagged with
the source module. Human-facing output (the audit report) is rendered
separately by the CLI, so log lines go to stderr and never interleave with a
report someone might pipe into another tool.

How this works:
  - We use Python's standard `logging` module, but replace the default
    formatter with JsonFormatter, which serializes every record into one line.
  - One handler always goes to stderr; a second, optional one goes to a file.
  - `get_logger` is the only way to create loggers in this package.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "release_scholar.audit.engine", "msg": "Audit complete", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_PACKAGE_PREFIX = "release_scholar"

# LogRecord attributes that are not caller-supplied context.
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

    Each entry carries four mandatory fields:
      ts:     ISO 8601 UTC timestamp
      level:  log level name
      module: the logger name (usually the Python module path)
      msg:    the formatted message string

    Anything passed through the `extra` kwarg is merged in as additional
    context fields, which is how the audit and build steps attach paths,
    counts and hashes.
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


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Level for loggers created without an explicit one; set_log_level updates it.
_default_level = "INFO"


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module calls this once at import time and keeps the returned
    instance in a module-level `_logger`.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to
                   the package-wide level last given to set_log_level.
        log_file: Optional path to a log file. If provided, logs go to both
                  stderr and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level or _default_level)
    logger.setLevel(level)

    # Calling get_logger twice for one name must not stack handlers.
    if logger.handlers:
        return logger

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(stream=sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def set_log_level(log_level: str) -> None:
    """
    Apply one level to every package logger, existing and future.

    Module loggers are created at import time; the CLI calls this after
    parsing --log-level so the flag reaches all of them, including modules
    imported later.
    """
    global _default_level
    level = _resolve_log_level(log_level)
    _default_level = log_level.upper()
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if name == _PACKAGE_PREFIX or name.startswith(_PACKAGE_PREFIX + "."):
            logger.setLevel(level)
