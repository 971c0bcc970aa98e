"""Structured JSON logging for claim-registry.

Writes JSONL to .claim-registry/claim-registry.log with rotation (5MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "claim_registry"
_LOG_FILENAME = "claim-registry.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3
_EXTRA_FIELDS = ("step", "claim", "status", "duration_ms", "error")


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def _file_handlers(logger: logging.Logger) -> list[RotatingFileHandler]:
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


def setup_logging(config_dir: Path, *, level: int = logging.INFO) -> logging.Logger:
    """Attach the JSONL file handler for *config_dir* to the package logger.

    Module loggers (``claim_registry.*``) propagate into it. Calling again
    with the same directory is a no-op; a different directory replaces the
    previous handler so the process never writes two logs.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_path = Path(os.path.abspath(config_dir / _LOG_FILENAME))

    with _setup_lock:
        current = _file_handlers(logger)
        if any(h.baseFilename == str(log_path) for h in current):
            return logger
        for stale in current:
            logger.removeHandler(stale)
            stale.close()

        handler = RotatingFileHandler(log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
