"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- Helper for inventory operation logging

Usage:
    from hostel_ledger.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Reserved slots", extra={"room_id": "room-1"})
"""

import datetime as dt
import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a correlation ID prefix.

        Args:
            record: Log record to format

        Returns:
            Formatted log string
        """
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Add correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; existing handlers get the formatter
    instead of new handlers being stacked.

    Args:
        level: Log level name
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(StructuredFormatter(LOG_FORMAT))


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def log_inventory_operation(
    logger: logging.Logger,
    operation: str,
    *,
    room_id: str,
    check_in: dt.date | None = None,
    check_out: dt.date | None = None,
    quantity: int | None = None,
    result: str = "success",
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a ledger operation with structured context.

    Severity follows the result: ``success`` is INFO, ``rejected`` (a
    business-rule refusal) is WARNING, ``defect`` (an invariant violation
    such as a release overflow) and ``error`` are ERROR.

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "reserve", "seed")
        room_id: Room the operation touched
        check_in: First day of the range, if any
        check_out: Day after the last day of the range, if any
        quantity: Slots involved, if relevant
        result: success, rejected, defect or error
        error: Error message if the operation failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {
        "operation": operation,
        "room_id": room_id,
        "result": result,
    }
    if check_in is not None:
        context["check_in"] = check_in.isoformat()
    if check_out is not None:
        context["check_out"] = check_out.isoformat()
    if quantity is not None:
        context["quantity"] = quantity
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Inventory operation: {operation}"]
    for key, value in context.items():
        if key != "operation":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if result in ("defect", "error"):
        logger.error(message, extra=context)
    elif result == "rejected":
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)
