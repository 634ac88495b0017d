"""
Structured logging for sync runs.

Each log line is one JSON object. The run context the orchestrator binds
(``run_id``, ``mode``) and the record coordinates codecs and the client
attach (``kind``, ``record_id``) are lifted to the top level so a single
run, kind or record can be grepped out of a log. Any other ``extra``
values are nested under ``"extra"``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Context keys promoted to the top level, in output order
RUN_CONTEXT_KEYS = ("run_id", "mode", "kind", "record_id")

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredJsonFormatter(logging.Formatter):
    """One JSON object per line, run context first."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        for key in RUN_CONTEXT_KEYS:
            if key in record.__dict__:
                entry[key] = record.__dict__[key]
        entry["msg"] = record.getMessage()

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key not in RUN_CONTEXT_KEYS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str = "nomis_sync",
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Route the sync engine's logs through the JSON formatter.

    Logs go to stderr by default so command output on stdout stays
    parseable. Calling this again replaces the JSON handler rather than
    adding a second one.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: the package logger)
        stream: Output stream (default: stderr)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, StructuredJsonFormatter):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


class SyncLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds sync run context to all log messages.

    The orchestrator binds ``run_id`` and ``mode`` once per run.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
