"""
Account Service Logging

Every ledger operation logs one line naming the operation (``action``) and
the account or transaction it touched (``resource``). In JSON mode those
fields become keys of the emitted object so log shippers can index them;
text mode is for reading the service's output in a terminal.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes log_action attaches to a record, in output order
LEDGER_FIELDS = ("correlation_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """
    Render a record as a single JSON object

    The timestamp is when the ledger event was logged, in UTC. Ledger fields
    that were not supplied are left out rather than written as null, and
    Decimal amounts and datetimes in ``extra`` fall back to ``str``.
    """

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

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "account_service",
                  log_format: str = "json") -> logging.Logger:
    """
    Attach the service's single stream handler to its top-level logger.

    The ledger, API and seed loggers are children of ``account_service`` and
    inherit this handler. Calling it again (the app factory does on every
    ``create_app``) replaces the handler instead of stacking another.

    Args:
        level: DEBUG shows statement queries, INFO every committed operation,
            WARNING only rejected debits and administrative balance overrides
        logger_name: Top-level logger of the service
        log_format: "json" for one object per line, "text" for terminal output

    Returns:
        The configured top-level logger
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Uvicorn configures the root logger too; stop ledger lines printing twice
    logger.propagate = False

    return logger


def get_logger(name: str = "account_service") -> logging.Logger:
    """Logger for one part of the service, e.g. ``account_service.ledger``"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               correlation_id: Optional[str] = None, extra: Optional[dict] = None):
    """
    Log one ledger operation.

    Args:
        logger: Logger of the calling component
        level: Level name such as "info" or "warning"
        message: Human-readable summary, e.g. "Transferred RUB 200.00 from A to B"
        action: Ledger operation name, e.g. "transfer" or "register_transaction"
        resource: ID of the account or transaction the operation produced or touched
        correlation_id: ID tying together the lines of one API request
        extra: Operation details such as balances and counterpart IDs
    """
    numeric_level = getattr(logging, level.upper())
    if not logger.isEnabledFor(numeric_level):
        return

    fields = {
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra or None,
    }
    logger.log(numeric_level, message,
               extra={k: v for k, v in fields.items() if v is not None})
