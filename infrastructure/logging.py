"""Structured JSON logging for the order service."""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from infrastructure.config import get_settings

# LogRecord attribute carrying keyword context passed to StructuredLogger
CONTEXT_ATTR = "context"


class StructuredLogger:
    """Logger whose keyword arguments end up as top-level JSON fields."""

    def __init__(self, service_name: str, level: int = logging.INFO, stream: Optional[TextIO] = None):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # One handler per logger name, even when get_logger is called repeatedly
        self.logger.handlers.clear()
        self.logger.addHandler(self._setup_handler(stream or sys.stdout))

    def _setup_handler(self, stream: TextIO) -> logging.Handler:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter(self.service_name))
        return handler

    def _log(self, level: int, message: str, exc_info: bool, /, **context: Any) -> None:
        self.logger.log(level, message, exc_info=exc_info, extra={CONTEXT_ATTR: context})

    def debug(self, message: str, /, **context: Any) -> None:
        self._log(logging.DEBUG, message, False, **context)

    def info(self, message: str, /, **context: Any) -> None:
        self._log(logging.INFO, message, False, **context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._log(logging.WARNING, message, False, **context)

    def error(self, message: str, /, exc_info: bool = False, **context: Any) -> None:
        """Log an error, attaching the active traceback when exc_info is set."""
        self._log(logging.ERROR, message, exc_info, **context)


class JsonFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, CONTEXT_ATTR, None)
        # reserved fields are written last so context keys cannot shadow them
        entry: Dict[str, Any] = dict(context or {})
        entry.update({
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        })

        if record.exc_info:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(entry, default=str)


def get_logger(service_name: Optional[str] = None, level: Optional[int] = None) -> StructuredLogger:
    """Build a structured logger, defaulting name and level from settings."""
    settings = get_settings()
    return StructuredLogger(
        service_name=service_name or settings.service_name,
        level=settings.log_level_value if level is None else level,
    )
