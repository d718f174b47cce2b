"""Centralized exception classes for excalibur.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the package.

Exception Hierarchy:
    ExcaliburError (base)
    ├── WorkbookError
    │   ├── WorkbookNotFoundError
    │   ├── WorkbookOpenError
    │   │   └── WorkbookTooLargeError
    │   ├── SheetReadError
    │   ├── WorkbookCloseError (logged, never raised)
    │   └── WorkbookClosedError
    └── QueryError
        ├── InvalidOperatorError (also ValueError)
        ├── InvalidFilterError (also ValueError)
        └── ImmutableRowError (also TypeError)

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the package.

    Error codes are grouped by category:
    - E1xxx: Workbook/file errors
    - E2xxx: Query errors
    - E9xxx: Internal/unexpected errors
    """

    # Workbook errors (E1xxx)
    WORKBOOK_NOT_FOUND = "E1001"
    WORKBOOK_OPEN_FAILED = "E1002"
    WORKBOOK_TOO_LARGE = "E1003"
    SHEET_READ_FAILED = "E1004"
    WORKBOOK_CLOSE_FAILED = "E1005"
    WORKBOOK_CLOSED = "E1006"

    # Query errors (E2xxx)
    INVALID_OPERATOR = "E2001"
    INVALID_FILTER = "E2002"
    ROW_IMMUTABLE = "E2003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class ExcaliburError(Exception):
    """Base exception for all excalibur errors.

    All custom exceptions in the package inherit from this class.
    It provides:
    - Unique error codes for programmatic handling
    - Structured error details for logging and debugging

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for structured logging.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Workbook Errors (E1xxx)
# =============================================================================


class WorkbookError(ExcaliburError):
    """Base class for workbook and file errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.WORKBOOK_OPEN_FAILED,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic workbook.
            details: Additional details.
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class WorkbookNotFoundError(WorkbookError):
    """Raised when the workbook path does not resolve to a readable file."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Workbook not found: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_NOT_FOUND,
            file_path=file_path,
            details=details,
        )


class WorkbookOpenError(WorkbookError):
    """Raised when an existing file cannot be opened as a workbook."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        error_code: ErrorCode = ErrorCode.WORKBOOK_OPEN_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            file_path=file_path,
            details=details,
        )


class WorkbookTooLargeError(WorkbookOpenError):
    """Raised when a workbook exceeds the configured maximum size."""

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            file_path: Optional file path.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"Workbook size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            file_path=file_path,
            error_code=ErrorCode.WORKBOOK_TOO_LARGE,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class SheetReadError(WorkbookError):
    """Raised when the decoder fails while reading a sheet's rows."""

    def __init__(
        self,
        sheet_name: str,
        message: str | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["sheet_name"] = sheet_name
        message = message or f"Failed to read sheet '{sheet_name}'"
        super().__init__(
            message=message,
            error_code=ErrorCode.SHEET_READ_FAILED,
            file_path=file_path,
            details=details,
        )
        self.sheet_name = sheet_name


class WorkbookCloseError(WorkbookError):
    """Describes a failure releasing the workbook file.

    Close is best-effort: this error is built for structured logging and
    is never raised to callers.
    """

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_CLOSE_FAILED,
            file_path=file_path,
            details=details,
        )


class WorkbookClosedError(WorkbookError):
    """Raised when a closed workbook handle is used."""

    def __init__(
        self,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"Workbook is closed: {file_path}",
            error_code=ErrorCode.WORKBOOK_CLOSED,
            file_path=file_path,
            details=details,
        )


# =============================================================================
# Query Errors (E2xxx)
# =============================================================================


class QueryError(ExcaliburError):
    """Base class for errors raised while querying sheet rows."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_FILTER,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class InvalidOperatorError(QueryError, ValueError):
    """Raised when a multi-column filter uses an unknown combination operator."""

    def __init__(
        self,
        operator: object,
        allowed: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected operator.

        Args:
            operator: The operator value that was rejected.
            allowed: Operators that would have been accepted.
            details: Additional details.
        """
        allowed = allowed or ["AND", "OR"]
        details = details or {}
        details["operator"] = repr(operator)
        details["allowed"] = allowed
        message = (
            f"Invalid operator {operator!r}. "
            f"The possible values are {' or '.join(repr(a) for a in allowed)}."
        )
        super().__init__(message, ErrorCode.INVALID_OPERATOR, details)
        self.operator = operator


class InvalidFilterError(QueryError, ValueError):
    """Raised when filter arguments do not match any supported shape."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_FILTER, details)


class ImmutableRowError(QueryError, TypeError):
    """Raised when a frozen row is modified."""

    def __init__(
        self,
        column_name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["column_name"] = column_name
        super().__init__(
            f"Row is read-only; cannot set column '{column_name}'",
            ErrorCode.ROW_IMMUTABLE,
            details,
        )
        self.column_name = column_name
