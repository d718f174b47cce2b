from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook

from excalibur.workbook import WorkbookHandle

COLUMNS = ["ColumnA", "ColumnB", "ColumnC", "ColumnD"]


def _sheet1_rows() -> list[list[str]]:
    rows = [[f"a{i}", f"b{i}", f"c{i}", f"d{i}"] for i in range(1, 11)]
    rows[2][1] = "bazinga"
    return rows


def _sheet2_rows() -> list[list[str]]:
    rows = [[f"a{i}", f"b{i}", f"c{i}", f"d{i}"] for i in range(1, 11)]
    rows[1][3] = "bazinga"
    rows[4][3] = "bingo"
    rows[7][3] = "bazinga"
    rows[4][1] = "oje"
    rows[8][1] = "oje"
    return rows


@pytest.fixture
def sheet1_rows() -> list[list[str]]:
    """Data rows of Sheet1; row 3 has ColumnB == "bazinga"."""
    return _sheet1_rows()


@pytest.fixture
def sheet2_rows() -> list[list[str]]:
    """Data rows of Sheet2.

    ColumnD is "bazinga" or "bingo" in rows 2, 5 and 8; ColumnB is "oje" in
    rows 5 and 9.
    """
    return _sheet2_rows()


@pytest.fixture
def book_path(tmp_path: Path) -> Path:
    """Workbook with two 4x10 sheets plus header-only, empty, sparse and typed sheets."""
    wb = Workbook()
    ws1 = wb.active
    ws1.title = "Sheet1"
    ws1.append(COLUMNS)
    for row in _sheet1_rows():
        ws1.append(row)

    ws2 = wb.create_sheet("Sheet2")
    ws2.append(COLUMNS)
    for row in _sheet2_rows():
        ws2.append(row)

    header_only = wb.create_sheet("HeaderOnly")
    header_only.append(COLUMNS)

    wb.create_sheet("Empty")

    # Header on row 3, gap in the header at column B, a blank row at 6.
    sparse = wb.create_sheet("Sparse")
    sparse["A3"] = "Name"
    sparse["C3"] = "Score"
    sparse["A5"] = "Alice"
    sparse["B5"] = "orphan"
    sparse["C5"] = "10"
    sparse["A7"] = "Bob"
    sparse["C8"] = "2.5"

    typed = wb.create_sheet("Typed")
    typed.append(["Label", "Value"])
    typed.append(["int", 42])
    typed.append(["float", 3.0])
    typed.append(["fraction", 2.5])
    typed.append(["bool", True])
    typed.append(["date", datetime(2024, 1, 15)])

    path = tmp_path / "test-book.xlsx"
    wb.save(path)
    return path


@pytest.fixture(params=[True, False], ids=["read_only", "full_load"])
def workbook(request: pytest.FixtureRequest, book_path: Path) -> Iterator[WorkbookHandle]:
    """Open handle on ``book_path`` in both openpyxl loading modes."""
    handle = WorkbookHandle.open(book_path, read_only=request.param)
    yield handle
    handle.close()
