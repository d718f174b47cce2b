"""Structured logging utilities for excalibur.

This module provides:
- Workbook and sheet tracking using contextvars for correlation across calls
- Structured logging with consistent format and metadata
- Load metrics logging helpers

Usage:
    from excalibur.utils.logging import get_logger, LogContext, timed_operation

    logger = get_logger(__name__)

    with LogContext(workbook="book.xlsx", sheet="Sheet1"):
        logger.debug("Loading sheet")

    with timed_operation(logger, "load_sheet") as metrics:
        metrics.rows_loaded = 10
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from excalibur.config import settings

# Context variables for workbook tracking
_workbook_var: ContextVar[str | None] = ContextVar("workbook", default=None)
_sheet_var: ContextVar[str | None] = ContextVar("sheet", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_workbook() -> str | None:
    """Get the current workbook path from context.

    Returns:
        The current workbook path or None if not set.
    """
    return _workbook_var.get()


def set_workbook(workbook: str | None) -> None:
    """Set the workbook path in context.

    Args:
        workbook: The workbook path to set, or None to clear.
    """
    _workbook_var.set(workbook)


def get_sheet() -> str | None:
    """Get the current sheet name from context."""
    return _sheet_var.get()


def set_sheet(sheet: str | None) -> None:
    """Set the sheet name in context."""
    _sheet_var.set(sheet)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars."""
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _workbook_var.set(None)
    _sheet_var.set(None)
    _extra_context_var.set(None)


@dataclass
class LoadMetrics:
    """Container for metrics collected while loading workbook content.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        rows_loaded: Number of data rows materialized.
        cells_read: Number of physical cells read from the decoder.
        custom_metrics: Additional custom metrics.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    rows_loaded: int = 0
    cells_read: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging.

        Zero counters are omitted.
        """
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        if self.rows_loaded > 0:
            result["rows_loaded"] = self.rows_loaded
        if self.cells_read > 0:
            result["cells_read"] = self.cells_read
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes records with the current workbook context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = []
        workbook = get_workbook()
        sheet = get_sheet()
        if workbook:
            prefix_parts.append(f"workbook={workbook}")
        if sheet:
            prefix_parts.append(f"sheet={sheet}")

        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        # Restore so other handlers see the raw message
        record.msg = original_msg

        return result


class StructuredLogger:
    """Logger wrapper with structured key-value logging.

    Wraps a standard Python logger with additional methods for:
    - Logging with key=value pairs appended to the message
    - Load metrics logging
    - Structured error logging
    """

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(
        self,
        message: str,
        **kwargs: Any,
    ) -> str:
        """Build a message with structured key-value pairs.

        Args:
            message: Base message.
            **kwargs: Additional key-value pairs to include.

        Returns:
            Formatted message string.
        """
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def log_metrics(self, metrics: LoadMetrics) -> None:
        """Log load metrics at debug level."""
        self.debug(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_error(self, error: Any, exc_info: bool = False) -> None:
        """Log an ExcaliburError with its code and details.

        Args:
            error: Error exposing ``to_dict()``.
            exc_info: Whether to include exception info.
        """
        data = dict(error.to_dict())
        message = data.pop("message")
        details = data.pop("details", {})
        self.error(message, exc_info=exc_info, **data, **details)


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(workbook="book.xlsx", sheet="Sheet1"):
            logger.debug("Loading...")  # Will include workbook and sheet
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize with context values.

        Args:
            **kwargs: Key-value pairs to add to log context.
        """
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_workbook: str | None = None
        self._old_sheet: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_workbook = get_workbook()
        self._old_sheet = get_sheet()

        new_context = dict(self._new_context)
        workbook = new_context.pop("workbook", None)
        sheet = new_context.pop("sheet", None)

        if workbook is not None:
            set_workbook(str(workbook))
        if sheet is not None:
            set_sheet(str(sheet))

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_workbook(self._old_workbook)
        set_sheet(self._old_sheet)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[LoadMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "load_sheet") as metrics:
            metrics.rows_loaded = 10

        # Logs: "Performance: load_sheet | operation=..., duration_seconds=..."

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        LoadMetrics instance for tracking.
    """
    metrics = LoadMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_metrics(metrics)


def configure_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure console logging for applications using excalibur.

    Args:
        level: Log level (int or string like "INFO"). Defaults to
            ``settings.log_level``, or DEBUG when ``settings.debug`` is set.
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if level is None:
        level = logging.DEBUG if settings.debug else settings.log_level_int
    elif isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.debug("Sheet loaded", sheet="Sheet1", rows=10)
    """
    return StructuredLogger(name)
