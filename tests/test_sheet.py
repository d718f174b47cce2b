"""Tests for SheetTable construction and row filtering."""

from __future__ import annotations

import logging

import pandas as pd
import pytest

from excalibur.config import settings
from excalibur.row import CellRow
from excalibur.services.workbook_reader import DecodedSheet, PhysicalCell, PhysicalRow
from excalibur.sheet import FilterOperator, SheetTable
from excalibur.utils.exceptions import (
    ErrorCode,
    InvalidFilterError,
    InvalidOperatorError,
)


def _decoded(name: str, rows: list[tuple[int, list[tuple[int, str]]]]) -> DecodedSheet:
    return DecodedSheet(
        name=name,
        rows=tuple(
            PhysicalRow(
                row_index=row_index,
                cells=tuple(PhysicalCell(col, value) for col, value in cells),
            )
            for row_index, cells in rows
        ),
    )


@pytest.fixture
def table() -> SheetTable:
    """People table: header plus five rows, one missing its City cell."""
    decoded = _decoded(
        "People",
        [
            (0, [(0, "Name"), (1, "City"), (2, "Team")]),
            (1, [(0, "Ana"), (1, "Lisbon"), (2, "red")]),
            (2, [(0, "Ben"), (1, "Porto"), (2, "blue")]),
            (3, [(0, "Cid"), (2, "red")]),
            (4, [(0, "Dee"), (1, "Lisbon"), (2, "blue")]),
            (5, [(0, "Eve"), (1, "lisbon"), (2, "green")]),
        ],
    )
    result = SheetTable.from_decoded(decoded)
    assert result is not None
    return result


def _names(rows: list[CellRow]) -> list[str | None]:
    return [row.get("Name") for row in rows]


class TestConstruction:
    """Tests for SheetTable.from_decoded."""

    def test_no_physical_rows_is_absent(self) -> None:
        assert SheetTable.from_decoded(_decoded("Empty", [])) is None

    def test_header_only_is_absent(self) -> None:
        decoded = _decoded("HeaderOnly", [(0, [(0, "A"), (1, "B")])])
        assert SheetTable.from_decoded(decoded) is None

    def test_header_row_without_cells_is_absent(self) -> None:
        decoded = _decoded("NoHeader", [(0, []), (1, [(0, "x")])])
        assert SheetTable.from_decoded(decoded) is None

    def test_header_and_rows(self, table: SheetTable) -> None:
        assert dict(table.get_header()) == {0: "Name", 1: "City", 2: "Team"}
        assert len(table.get_rows()) == 5
        assert _names(table.get_rows()) == ["Ana", "Ben", "Cid", "Dee", "Eve"]
        assert table.name == "People"

    def test_header_is_first_row_by_index(self) -> None:
        """The lowest row index is the header, wherever it sits in the sequence."""
        decoded = _decoded(
            "Shuffled",
            [
                (7, [(0, "x1")]),
                (3, [(0, "Col")]),
                (9, [(0, "x2")]),
            ],
        )
        result = SheetTable.from_decoded(decoded)
        assert result is not None
        assert dict(result.header) == {0: "Col"}
        assert [row.get("Col") for row in result] == ["x1", "x2"]

    def test_cells_outside_header_are_skipped(self) -> None:
        decoded = _decoded(
            "Sparse",
            [
                (0, [(0, "Name"), (2, "Score")]),
                (1, [(0, "Ana"), (1, "orphan"), (2, "7")]),
            ],
        )
        result = SheetTable.from_decoded(decoded)
        assert result is not None
        assert result.get_rows()[0].to_dict() == {"Name": "Ana", "Score": "7"}

    def test_missing_cells_are_absent_from_row(self, table: SheetTable) -> None:
        cid = table.get_rows()[2]
        assert cid.get("City") is None
        assert "City" not in cid

    def test_rows_are_frozen(self, table: SheetTable) -> None:
        assert all(row.frozen for row in table)

    def test_get_column_name(self, table: SheetTable) -> None:
        assert table.get_column_name(1) == "City"
        assert table.get_column_name(10) is None

    def test_columns_in_index_order(self) -> None:
        decoded = _decoded(
            "Ordered",
            [
                (0, [(2, "C"), (0, "A"), (1, "B")]),
                (1, [(0, "1")]),
            ],
        )
        result = SheetTable.from_decoded(decoded)
        assert result is not None
        assert result.columns == ["A", "B", "C"]

    def test_duplicate_header_names_collapse(self) -> None:
        """A repeated name keeps one cell per row, from the right-most column."""
        decoded = _decoded(
            "Dupes",
            [
                (0, [(0, "A"), (1, "A"), (2, "B")]),
                (1, [(0, "x"), (1, "y"), (2, "z")]),
            ],
        )
        result = SheetTable.from_decoded(decoded)
        assert result is not None
        assert dict(result.header) == {0: "A", 1: "A", 2: "B"}
        assert result.columns == ["A", "B"]
        assert result.get_rows()[0].to_dict() == {"A": "y", "B": "z"}


class TestReadOnlyViews:
    """Callers cannot mutate cached state through returned collections."""

    def test_header_view_is_read_only(self, table: SheetTable) -> None:
        with pytest.raises(TypeError):
            table.get_header()[9] = "Injected"  # type: ignore[index]
        assert table.get_column_name(9) is None

    def test_rows_list_is_a_copy(self, table: SheetTable) -> None:
        rows = table.get_rows()
        rows.clear()
        assert len(table.get_rows()) == 5
        assert len(table) == 5


class TestSingleColumnFilters:
    """Tests for rows_where and rows_where_in."""

    def test_rows_where_exact_match(self, table: SheetTable) -> None:
        assert _names(table.rows_where("City", "Lisbon")) == ["Ana", "Dee"]

    def test_rows_where_is_case_sensitive(self, table: SheetTable) -> None:
        assert _names(table.rows_where("City", "lisbon")) == ["Eve"]

    def test_rows_where_no_partial_match(self, table: SheetTable) -> None:
        assert table.rows_where("City", "Lis") == []

    def test_rows_where_missing_cell_does_not_match(self, table: SheetTable) -> None:
        """A row lacking the filtered column is excluded rather than failing."""
        assert "Cid" not in _names(table.rows_where("City", "Porto"))
        assert table.rows_where("Unknown", "x") == []

    def test_rows_where_none_value_matches_nothing(self, table: SheetTable) -> None:
        """Cid has no City cell, and a missing cell never equals anything."""
        assert table.rows_where("City", None) == []  # type: ignore[arg-type]

    def test_rows_where_in(self, table: SheetTable) -> None:
        result = table.rows_where_in("City", ["Porto", "Lisbon"])
        assert _names(result) == ["Ana", "Ben", "Dee"]

    def test_rows_where_in_accepts_any_iterable(self, table: SheetTable) -> None:
        values = (city for city in ["Porto"])
        assert _names(table.rows_where_in("City", values)) == ["Ben"]

    def test_rows_where_in_empty_values(self, table: SheetTable) -> None:
        assert table.rows_where_in("City", []) == []


class TestMultiColumnFilters:
    """Tests for filter_rows."""

    def test_and_requires_every_filter(self, table: SheetTable) -> None:
        filters = {"City": ["Lisbon", "Porto"], "Team": ["blue"]}
        assert _names(table.filter_rows(filters, "AND")) == ["Ben", "Dee"]

    def test_or_requires_any_filter(self, table: SheetTable) -> None:
        filters = {"City": ["Porto"], "Team": ["red"]}
        assert _names(table.filter_rows(filters, "OR")) == ["Ana", "Ben", "Cid"]

    def test_enum_operator(self, table: SheetTable) -> None:
        filters = {"Team": ["green"]}
        assert _names(table.filter_rows(filters, FilterOperator.OR)) == ["Eve"]

    def test_default_operator_is_and(self, table: SheetTable) -> None:
        assert settings.default_filter_operator == "AND"
        filters = {"City": ["Lisbon"], "Team": ["red"]}
        assert _names(table.filter_rows(filters)) == ["Ana"]

    @pytest.mark.parametrize("filters", [None, {}])
    def test_empty_filters_return_all_rows(
        self, table: SheetTable, filters: dict[str, list[str]] | None
    ) -> None:
        assert table.filter_rows(filters, "OR") == table.get_rows()

    def test_missing_cell_counts_as_no_match(self, table: SheetTable) -> None:
        filters = {"City": ["Lisbon"], "Team": ["red"]}
        assert "Cid" not in _names(table.filter_rows(filters, "AND"))
        assert "Cid" in _names(table.filter_rows(filters, "OR"))

    @pytest.mark.parametrize("operator", ["XOR", "and", "", "AND "])
    def test_invalid_operator_raises(self, table: SheetTable, operator: str) -> None:
        with pytest.raises(InvalidOperatorError) as exc_info:
            table.filter_rows({"City": ["Lisbon"]}, operator)
        assert exc_info.value.error_code == ErrorCode.INVALID_OPERATOR
        assert isinstance(exc_info.value, ValueError)

    def test_invalid_operator_is_logged(
        self, table: SheetTable, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="excalibur.sheet"):
            with pytest.raises(InvalidOperatorError):
                table.filter_rows({"City": ["Lisbon"]}, "NOR")
        assert "E2001" in caplog.text

    def test_results_preserve_row_order_and_are_repeatable(
        self, table: SheetTable
    ) -> None:
        filters = {"Team": ["blue", "red"]}
        first = table.filter_rows(filters, "OR")
        second = table.filter_rows(filters, "OR")
        assert first == second
        assert _names(first) == ["Ana", "Ben", "Cid", "Dee"]


class TestGetRowsWhere:
    """Tests for the dispatching get_rows_where entry point."""

    def test_single_value(self, table: SheetTable) -> None:
        assert _names(table.get_rows_where("Team", "red")) == ["Ana", "Cid"]

    def test_value_list(self, table: SheetTable) -> None:
        assert _names(table.get_rows_where("Team", ["red", "green"])) == [
            "Ana",
            "Cid",
            "Eve",
        ]

    def test_filters_with_operator(self, table: SheetTable) -> None:
        filters = {"Team": ["red"], "City": ["Porto"]}
        assert _names(table.get_rows_where(filters, "OR")) == ["Ana", "Ben", "Cid"]

    def test_filters_without_operator_use_and(self, table: SheetTable) -> None:
        filters = {"Team": ["red"], "City": ["Lisbon"]}
        assert _names(table.get_rows_where(filters)) == ["Ana"]

    def test_column_without_values_is_rejected(self, table: SheetTable) -> None:
        with pytest.raises(InvalidFilterError):
            table.get_rows_where("Team")

    def test_unsupported_first_argument(self, table: SheetTable) -> None:
        with pytest.raises(InvalidFilterError) as exc_info:
            table.get_rows_where(42, "x")  # type: ignore[call-overload]
        assert isinstance(exc_info.value, ValueError)


class TestToDataFrame:
    """Tests for DataFrame export."""

    def test_columns_and_values(self, table: SheetTable) -> None:
        df = table.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["Name", "City", "Team"]
        assert len(df) == 5
        assert df.iloc[0]["City"] == "Lisbon"
        assert pd.isna(df.iloc[2]["City"])

    def test_duplicate_header_names_give_one_column(self) -> None:
        decoded = _decoded(
            "Dupes",
            [
                (0, [(0, "A"), (1, "A")]),
                (1, [(0, "x"), (1, "y")]),
            ],
        )
        result = SheetTable.from_decoded(decoded)
        assert result is not None
        df = result.to_dataframe()
        assert list(df.columns) == ["A"]
        assert df.iloc[0]["A"] == "y"
