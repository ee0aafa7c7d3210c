import json
import logging
import logging.config
from typing import Any, Dict

from app.core.config import Settings

ACCESS_LOGGER = "app.access"
SERVER_LOGGER = "app.server"

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}


class StructuredJSONFormatter(logging.Formatter):
    """Emit logs as JSON lines with optional structured context."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            log_record[key] = value

        return json.dumps(log_record, ensure_ascii=False, default=str)


_CONFIGURED = False


def configure_logging(settings: Settings) -> None:
    """Configure the process loggers once.

    Application and error logs go to stderr as JSON lines. Access lines
    (combined log format) and the start-up banner go to stdout verbatim.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = settings.LOG_LEVEL

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": "app.core.logging_config.StructuredJSONFormatter",
                    "datefmt": "%Y-%m-%dT%H:%M:%S%z",
                },
                "plain": {"format": "%(message)s"},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "level": log_level,
                    "stream": "ext://sys.stderr",
                },
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": log_level,
                "handlers": ["default"],
            },
            "loggers": {
                ACCESS_LOGGER: {"level": "INFO", "handlers": ["stdout"], "propagate": False},
                SERVER_LOGGER: {"level": "INFO", "handlers": ["stdout"], "propagate": False},
                "uvicorn.error": {"level": "INFO"},
            },
        }
    )

    _CONFIGURED = True
