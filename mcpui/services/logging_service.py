# -*- coding: utf-8 -*-
"""Location: ./mcpui/services/logging_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Logging Service Implementation.
This module configures the standard library logging tree for the server
(console handler, text or JSON formatting, uvicorn loggers routed through the
same handler) and hands out named loggers to the rest of the package.
"""

# Standard
from datetime import datetime, timezone
import logging
import logging.config
from typing import Any, Dict, Optional

# Third-Party
import orjson

# First-Party
from mcpui.config import settings

_configured = False  # pylint: disable=invalid-name


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access-log lines for the health endpoint.

    Examples:
        >>> f = HealthCheckFilter()
        >>> rec = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"GET /health HTTP/1.1" 200', None, None)
        >>> f.filter(rec)
        False
        >>> rec = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"POST /mcp/messages HTTP/1.1" 202', None, None)
        >>> f.filter(rec)
        True
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health check requests from uvicorn access logs.

        Args:
            record: Log record to inspect.

        Returns:
            False for health check access lines, True otherwise.
        """
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "/health" in message and "GET" in message:
                return False
        return True


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line.

    Examples:
        >>> rec = logging.LogRecord("mcpui.test", logging.WARNING, "", 0, "hello %s", ("world",), None)
        >>> out = orjson.loads(JsonFormatter().format(rec))
        >>> (out["level"], out["logger"], out["message"])
        ('WARNING', 'mcpui.test', 'hello world')
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as JSON.

        Args:
            record: Log record.

        Returns:
            JSON encoded log line.
        """
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode()


def get_logging_config(level: str, log_format: str = "text") -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping for the server.

    Args:
        level: Root log level name.
        log_format: ``text`` or ``json``.

    Returns:
        A logging configuration dictionary.

    Examples:
        >>> cfg = get_logging_config("DEBUG", "json")
        >>> cfg["root"]["level"]
        'DEBUG'
        >>> cfg["handlers"]["default"]["formatter"]
        'json'
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "text": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": log_format, "stream": "ext://sys.stderr"},
            "access": {"class": "logging.StreamHandler", "formatter": log_format, "stream": "ext://sys.stderr", "filters": ["health_check_filter"]},
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


class LoggingService:
    """Configure logging once per process and hand out named loggers.

    Examples:
        >>> service = LoggingService()
        >>> service.get_logger("mcpui.example").name
        'mcpui.example'
    """

    def __init__(self, level: Optional[str] = None, log_format: Optional[str] = None) -> None:
        """Initialize the logging service.

        Args:
            level: Log level override; defaults to ``settings.log_level``.
            log_format: Format override; defaults to ``settings.log_format``.
        """
        self._level = (level or settings.log_level).upper()
        self._format = log_format or settings.log_format

    async def initialize(self) -> None:
        """Apply the logging configuration (idempotent per process)."""
        global _configured  # pylint: disable=global-statement
        if _configured:
            return
        logging.config.dictConfig(get_logging_config(self._level, self._format))
        _configured = True
        logging.getLogger(__name__).info("Logging initialized at level %s (%s format)", self._level, self._format)

    async def shutdown(self) -> None:
        """Flush every handler attached to the root logger."""
        for handler in logging.getLogger().handlers:
            handler.flush()

    def get_logger(self, name: str) -> logging.Logger:
        """Return a named logger.

        Args:
            name: Logger name, usually ``__name__``.

        Returns:
            The logger.
        """
        return logging.getLogger(name)
