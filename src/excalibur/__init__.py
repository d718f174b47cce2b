"""Excalibur - lazy, column-keyed access to spreadsheet sheets."""

from excalibur.config import Settings, settings
from excalibur.row import CellRow
from excalibur.sheet import FilterOperator, SheetTable
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
from excalibur.utils.logging import configure_logging, get_logger
from excalibur.workbook import WorkbookHandle, open_workbook

__all__ = [
    "CellRow",
    "ErrorCode",
    "ExcaliburError",
    "FilterOperator",
    "ImmutableRowError",
    "InvalidFilterError",
    "InvalidOperatorError",
    "QueryError",
    "Settings",
    "SheetReadError",
    "SheetTable",
    "WorkbookCloseError",
    "WorkbookClosedError",
    "WorkbookError",
    "WorkbookHandle",
    "WorkbookNotFoundError",
    "WorkbookOpenError",
    "WorkbookTooLargeError",
    "configure_logging",
    "get_logger",
    "open_workbook",
    "settings",
]
__version__ = "0.1.0"
