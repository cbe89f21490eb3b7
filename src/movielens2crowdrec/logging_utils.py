from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Optional, Union

STRUCTURED_FIELDS = (
    "event",
    "phase",
    "schema",
    "path",
    "etype",
    "eid",
    "rid",
    "count",
    "line",
    "skipped",
    "exception_type",
)


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter: one JSON object per log line.

    Keeps converter progress and failures machine-readable when runs are
    driven from batch jobs.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Additional metadata passed via logger.info(..., extra={})
        for attr in STRUCTURED_FIELDS:
            if hasattr(record, attr):
                log_payload[attr] = getattr(record, attr)

        if record.exc_info:
            log_payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_payload, ensure_ascii=False, default=str)


def configure_logger(
    name: str = "movielens2crowdrec",
    level: Optional[Union[int, str]] = None,
) -> logging.Logger:
    """
    Configure and return a logger with JSON formatting.

    Prevents duplicate handlers; calling it twice returns the same logger.
    The level is only changed when `level` is given, or set to INFO the
    first time the logger is configured.
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)
    elif not logger.handlers:
        logger.setLevel(logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger
