"""openpyxl-backed decoder that yields the physical rows and cells of a sheet."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.chartsheet import Chartsheet
from openpyxl.workbook.workbook import Workbook

from excalibur.config import settings
from excalibur.utils.exceptions import (
    SheetReadError,
    WorkbookNotFoundError,
    WorkbookOpenError,
    WorkbookTooLargeError,
)
from excalibur.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PhysicalCell:
    """A cell that holds a value. ``column_index`` is zero-based."""

    column_index: int
    value: str


@dataclass(frozen=True)
class PhysicalRow:
    """A row with at least one physical cell. ``row_index`` is zero-based."""

    row_index: int
    cells: tuple[PhysicalCell, ...]

    @property
    def physical_cell_count(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class DecodedSheet:
    """The physical content of one worksheet, in row order."""

    name: str
    rows: tuple[PhysicalRow, ...]

    @property
    def physical_row_count(self) -> int:
        return len(self.rows)

    @property
    def first_row_index(self) -> int | None:
        if not self.rows:
            return None
        return min(row.row_index for row in self.rows)


def cell_to_string(value: Any) -> str:
    """Render a decoded cell value as the string stored in a row."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class WorkbookReader:
    """Owns one open openpyxl workbook and decodes its sheets on request."""

    def __init__(
        self,
        file_path: str | os.PathLike[str],
        *,
        read_only: bool | None = None,
        data_only: bool | None = None,
    ) -> None:
        """Open ``file_path`` as a workbook.

        Args:
            file_path: Path to an .xlsx/.xlsm workbook.
            read_only: openpyxl read-only mode; defaults to ``settings.read_only``.
            data_only: Read cached formula values; defaults to ``settings.data_only``.

        Raises:
            WorkbookNotFoundError: If the path is not a readable regular file.
            WorkbookTooLargeError: If the file exceeds the configured size limit.
            WorkbookOpenError: If the file cannot be opened as a workbook.
        """
        self.file_path = Path(file_path)
        self.read_only = settings.read_only if read_only is None else read_only
        self.data_only = settings.data_only if data_only is None else data_only
        self._workbook = self._open()

    def _open(self) -> Workbook:
        path_str = str(self.file_path)
        if not self.file_path.is_file() or not os.access(self.file_path, os.R_OK):
            raise WorkbookNotFoundError(path_str)

        try:
            file_size = self.file_path.stat().st_size
        except OSError as exc:
            raise WorkbookOpenError(
                f"Could not stat {path_str}: {exc}", file_path=path_str
            ) from exc
        if file_size > settings.max_file_size_bytes:
            raise WorkbookTooLargeError(
                file_size, settings.max_file_size_bytes, file_path=path_str
            )

        try:
            return load_workbook(
                filename=self.file_path,
                read_only=self.read_only,
                data_only=self.data_only,
            )
        except Exception as exc:
            raise WorkbookOpenError(
                f"Could not open {path_str}: {exc}",
                file_path=path_str,
                details={"cause": type(exc).__name__},
            ) from exc

    @property
    def sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def read_sheet(self, sheet_name: str) -> DecodedSheet | None:
        """Decode the physical rows of ``sheet_name``.

        Returns:
            The decoded sheet, or None if the workbook has no worksheet
            with that name.

        Raises:
            SheetReadError: If the decoder fails while reading rows.
        """
        if sheet_name not in self._workbook.sheetnames:
            return None
        worksheet = self._workbook[sheet_name]
        if isinstance(worksheet, Chartsheet):
            logger.debug("Skipping chartsheet", sheet=sheet_name)
            return None

        try:
            if self.read_only:
                # Stored dimensions can be stale; scan the whole sheet.
                worksheet.reset_dimensions()
            rows: list[PhysicalRow] = []
            for row_index, values in enumerate(
                worksheet.iter_rows(min_row=1, min_col=1, values_only=True)
            ):
                cells = tuple(
                    PhysicalCell(column_index=col_index, value=cell_to_string(value))
                    for col_index, value in enumerate(values)
                    if value is not None
                )
                if cells:
                    rows.append(PhysicalRow(row_index=row_index, cells=cells))
        except Exception as exc:
            raise SheetReadError(
                sheet_name,
                message=f"Failed to read sheet '{sheet_name}': {exc}",
                file_path=str(self.file_path),
            ) from exc

        return DecodedSheet(name=sheet_name, rows=tuple(rows))

    def close(self) -> None:
        """Release the workbook. Errors propagate to the caller."""
        self._workbook.close()
