"""
Structured Logging Configuration Module

Loan and payment events are logged with the owning company, the action and
the affected resource attached to the record. Records render as one JSON
object per line, or as plain text with the context appended.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Record attributes carried by log_action, in output order
CONTEXT_FIELDS = ("correlation_id", "company_id", "action", "resource", "extra")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context attributes present on a record"""
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(record_context(record))

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text line followed by key=value context"""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


FORMATTERS = {
    "json": JSONFormatter,
    "text": ContextTextFormatter,
}


def setup_logging(level: str = "INFO", logger_name: str = "lending", log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to the lending logger

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Logger to configure; module loggers are its children
        log_format: "json" or "text"

    Raises:
        ValueError: If the format is unknown
    """
    formatter_class = FORMATTERS.get(log_format)
    if formatter_class is None:
        raise ValueError(f"Unknown log format: {log_format}")

    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter_class())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Handled here only; the root logger would print it a second time
    logger.propagate = False

    return logger


def get_logger(name: str = "lending") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               company_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, correlation_id: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a loan event with its structured context.

    Args:
        logger: Logger instance
        level: Log level name (info, warning, error, ...)
        message: Log message
        company_id: Owning company of the resource
        action: Action being performed, e.g. record_payment
        resource: Affected resource, e.g. loan:<id>
        correlation_id: Request correlation ID
        extra: Additional structured data
    """
    context = {
        "company_id": company_id,
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra or None,
    }
    logger.log(
        getattr(logging, level.upper()),
        message,
        extra={key: value for key, value in context.items() if value is not None},
        stacklevel=2,
    )
