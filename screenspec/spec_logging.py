# screenspec/spec_logging.py
"""Logging setup for the screen-spec pipeline.

Console output uses a plain formatter; an optional log file receives one JSON
object per record so runs can be audited afterwards.
"""

from __future__ import annotations

import json
import logging as std_logging
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Union


LOGGER_NAME = "screenspec"


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Configure the 'screenspec' logger hierarchy."""
    logger = std_logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console_handler = std_logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(std_logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = std_logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    logger.debug("screenspec logging initialized")


class JsonFormatter(std_logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: std_logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False)


@contextmanager
def log_stage(stage: str, **extra_fields) -> Iterator[None]:
    """Log start/end (or failure) of one pipeline stage with its duration."""
    logger = std_logging.getLogger(f"{LOGGER_NAME}.stages")
    start_time = time.time()
    logger.debug(f"Starting stage: {stage}", extra={"extra_fields": {
        "stage": stage,
        "status": "started",
        **extra_fields,
    }})
    try:
        yield
    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"Failed stage: {stage} after {duration:.3f}s - {e}", extra={"extra_fields": {
            "stage": stage,
            "status": "failed",
            "duration": duration,
            "error_type": type(e).__name__,
            "error_message": str(e),
            **extra_fields,
        }})
        raise
    duration = time.time() - start_time
    logger.info(f"Completed stage: {stage} in {duration:.3f}s", extra={"extra_fields": {
        "stage": stage,
        "status": "completed",
        "duration": duration,
        **extra_fields,
    }})
