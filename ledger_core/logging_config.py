"""
Structured Logging Configuration Module

Ledger records are emitted as one JSON object per line. Engine and API
records carry the command that ran (`action`), the account it touched
(`resource`) and command-specific `details` such as amounts and
transaction ids.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


LEDGER_FIELDS = ("action", "resource", "details")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a record and its ledger fields as a JSON line"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in LEDGER_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Decimal amounts and datetimes fall back to str
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "ledger",
                  fmt: str = "json") -> logging.Logger:
    """
    Install a single stream handler on the ledger logger.

    Args:
        level: Log level name
        logger_name: Application logger; `ledger.*` loggers inherit it
        fmt: "json" for structured lines, "text" for plain lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(TEXT_FORMAT) if fmt == "text" else JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "ledger") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str, action: str,
               resource: Optional[str] = None,
               details: Optional[Dict[str, Any]] = None) -> None:
    """
    Log a ledger command with its structured fields.

    Args:
        logger: Logger instance
        level: Level name (info, warning, ...)
        message: Human readable summary
        action: Command name, e.g. "record_transaction"
        resource: Account touched, as "account:<id>"
        details: Command-specific values
    """
    logger.log(
        getattr(logging, level.upper()), message,
        extra={"action": action, "resource": resource, "details": details}
    )
