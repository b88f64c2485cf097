"""Logging utilities for the lancer gatekeeper."""
from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from lancer.config.settings import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format log messages as JSON for easier ingestion."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Simple coloured formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        return f"{color}[{record.levelname:8s}] {record.name}: {record.getMessage()}{reset}"


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.LOG_FILE_MAX_BYTES,
        backupCount=settings.LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def setup_logging() -> None:
    """Configure the ``lancer`` logger tree."""

    level = logging.DEBUG if settings.DEBUG else logging.INFO
    package_logger = logging.getLogger("lancer")
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter() if settings.DEBUG else JsonFormatter())
    package_logger.addHandler(console_handler)

    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        package_logger.addHandler(_file_handler(log_dir / "lancer.log", logging.INFO))
        package_logger.addHandler(_file_handler(log_dir / "lancer-error.log", logging.ERROR))


def get_logger(name: str) -> logging.Logger:
    """Return configured logger."""
    package_logger = logging.getLogger("lancer")
    if not package_logger.handlers:
        setup_logging()
    return logging.getLogger(name)


def get_request_logger(name: str, request_id: str, client: Optional[str] = None) -> logging.LoggerAdapter:
    """Attach contextual information to logs."""
    base_logger = get_logger(name)
    return logging.LoggerAdapter(base_logger, {"request_id": request_id, "client": client})
