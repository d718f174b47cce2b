"""Workbook handle with a lazily filled, per-handle sheet cache."""

from __future__ import annotations

import os
from pathlib import Path
from types import TracebackType

from excalibur.services.workbook_reader import WorkbookReader
from excalibur.sheet import SheetTable
from excalibur.utils.exceptions import (
    WorkbookCloseError,
    WorkbookClosedError,
    WorkbookError,
)
from excalibur.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)


class WorkbookHandle:
    """An open workbook that loads each sheet on first request.

    The handle exclusively owns its reader and the file it holds open.
    Loaded sheets are cached by name for the life of the handle.

    Usage:
        with WorkbookHandle.open("book.xlsx") as workbook:
            sheet = workbook.get_sheet("Sheet1")
            if sheet is not None:
                rows = sheet.rows_where("Status", "open")
    """

    def __init__(self, reader: WorkbookReader) -> None:
        self._reader = reader
        self._sheets: dict[str, SheetTable] = {}
        self._closed = False

    @classmethod
    def open(
        cls,
        file_path: str | os.PathLike[str],
        *,
        read_only: bool | None = None,
        data_only: bool | None = None,
    ) -> WorkbookHandle:
        """Open a workbook file.

        Raises:
            WorkbookNotFoundError: If the path is not a readable file.
            WorkbookOpenError: If the file cannot be opened as a workbook.
        """
        with LogContext(workbook=file_path):
            logger.debug("Opening workbook")
            try:
                reader = WorkbookReader(
                    file_path, read_only=read_only, data_only=data_only
                )
            except WorkbookError as exc:
                logger.log_error(exc)
                raise
            logger.debug("Workbook opened", sheets=len(reader.sheet_names))
        return cls(reader)

    @property
    def path(self) -> Path:
        return self._reader.file_path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sheet_names(self) -> list[str]:
        """Names of every sheet in the workbook, in workbook order."""
        self._ensure_open()
        return self._reader.sheet_names

    @property
    def loaded_sheets(self) -> list[str]:
        """Names of the sheets currently cached, in load order."""
        return list(self._sheets)

    def __contains__(self, sheet_name: object) -> bool:
        return not self._closed and sheet_name in self._reader.sheet_names

    def get_sheet(self, sheet_name: str) -> SheetTable | None:
        """Return the named sheet, loading and caching it on first access.

        Returns None, without caching, when the sheet does not exist or has
        no data row beneath its header.

        Raises:
            WorkbookClosedError: If the handle has been closed.
            SheetReadError: If the decoder fails while reading the sheet.
        """
        self._ensure_open()
        cached = self._sheets.get(sheet_name)
        if cached is not None:
            logger.debug("Sheet cache hit", sheet=sheet_name)
            return cached
        return self._load_sheet(sheet_name)

    def _load_sheet(self, sheet_name: str) -> SheetTable | None:
        with LogContext(workbook=self.path, sheet=sheet_name):
            logger.debug("Loading sheet")
            with timed_operation(logger, "load_sheet") as metrics:
                decoded = self._reader.read_sheet(sheet_name)
                table = None
                if decoded is not None:
                    metrics.cells_read = sum(
                        row.physical_cell_count for row in decoded.rows
                    )
                    table = SheetTable.from_decoded(decoded)
                if table is not None:
                    metrics.rows_loaded = len(table)

            if table is None:
                logger.debug("Specified sheet is empty or was not found")
                return None

            self._sheets[sheet_name] = table
            logger.debug(
                "Sheet loaded", columns=len(table.header), rows=len(table)
            )
            return table

    def close(self) -> None:
        """Release the workbook file. Safe to call more than once; never raises."""
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        except OSError as exc:
            error = WorkbookCloseError(
                f"Error while closing the workbook: {exc}",
                file_path=str(self.path),
            )
            logger.log_error(error)
        else:
            logger.debug("Workbook closed", workbook=self.path)

    def _ensure_open(self) -> None:
        if self._closed:
            raise WorkbookClosedError(str(self.path))

    def __enter__(self) -> WorkbookHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"WorkbookHandle(path={str(self.path)!r}, {state})"


def open_workbook(
    file_path: str | os.PathLike[str],
    *,
    read_only: bool | None = None,
    data_only: bool | None = None,
) -> WorkbookHandle:
    """Open a workbook; see :meth:`WorkbookHandle.open`."""
    return WorkbookHandle.open(file_path, read_only=read_only, data_only=data_only)
