"""Utilities package for excalibur.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from excalibur.utils.exceptions import (
    ErrorCode,
    ExcaliburError,
    ImmutableRowError,
    InvalidFilterError,
    InvalidOperatorError,
    QueryError,
    SheetReadError,
    WorkbookCloseError,
    WorkbookClosedError,
    WorkbookError,
    WorkbookNotFoundError,
    WorkbookOpenError,
    WorkbookTooLargeError,
)
from excalibur.utils.logging import (
    LogContext,
    StructuredLogger,
    configure_logging,
    get_logger,
    timed_operation,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "ExcaliburError",
    "ImmutableRowError",
    "InvalidFilterError",
    "InvalidOperatorError",
    "QueryError",
    "SheetReadError",
    "WorkbookCloseError",
    "WorkbookClosedError",
    "WorkbookError",
    "WorkbookNotFoundError",
    "WorkbookOpenError",
    "WorkbookTooLargeError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "timed_operation",
]
