"""
Structured logging configuration for the request validator.

This module provides centralized logging configuration with structured
JSON output. Nothing is configured on import; host applications call
``setup_logging`` when they want the validator's records formatted.
"""

import logging
import logging.config
import json
import sys
from datetime import datetime, UTC
from typing import Optional
from pathlib import Path

SERVICE_NAME = "request-validator"

# Fields carried on validation records via log_with_context
REQUEST_FIELDS = ("content_type", "status_code", "error_type", "param_count")


class StructuredFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs."""

    def __init__(self, service_name: str = SERVICE_NAME, version: str = "0.1.0"):
        super().__init__()
        self.service_name = service_name
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "version": self.version,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = record.stack_info

        return json.dumps(log_entry, default=str)


class RequestFormatter(logging.Formatter):
    """Formatter for per-request validation outcomes."""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "type": "request_validation",
            "message": record.getMessage()
        }

        for field in REQUEST_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, default=str)


def setup_logging(
    log_level: str = "INFO",
    service_name: str = SERVICE_NAME,
    version: str = "0.1.0",
    enable_file_logging: bool = False,
    log_file_path: Optional[str] = None
) -> None:
    """
    Setup structured logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        service_name: Name of the service for log entries
        version: Version of the service
        enable_file_logging: Whether to enable file logging
        log_file_path: Path to log file (defaults to logs/request_validator.log)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
                "service_name": service_name,
                "version": version
            },
            "request": {
                "()": RequestFormatter,
                "service_name": service_name
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "structured",
                "stream": sys.stdout
            },
            "requests": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "request",
                "stream": sys.stdout
            }
        },
        "loggers": {
            "request_validator": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False
            },
            "request_validator.requests": {
                "level": log_level,
                "handlers": ["requests"],
                "propagate": False
            }
        }
    }

    if enable_file_logging:
        if log_file_path is None:
            log_file_path = str(Path("logs") / "request_validator.log")
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "structured",
            "filename": log_file_path,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }
        config["loggers"]["request_validator"]["handlers"].append("file")

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **context: Additional context fields to include in log
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    record = logger.makeRecord(
        logger.name,
        levelno,
        "",
        0,
        message,
        (),
        None
    )

    for key, value in context.items():
        setattr(record, key, value)

    logger.handle(record)
