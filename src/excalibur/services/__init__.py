"""Services for decoding workbook files."""

from excalibur.services.workbook_reader import (
    DecodedSheet,
    PhysicalCell,
    PhysicalRow,
    WorkbookReader,
    cell_to_string,
)

__all__ = [
    "DecodedSheet",
    "PhysicalCell",
    "PhysicalRow",
    "WorkbookReader",
    "cell_to_string",
]
