"""Tabular view of one worksheet: a header plus ordered, column-keyed rows."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import overload

import pandas as pd

from excalibur.config import settings
from excalibur.row import CellRow
from excalibur.services.workbook_reader import DecodedSheet
from excalibur.utils.exceptions import InvalidFilterError, InvalidOperatorError
from excalibur.utils.logging import get_logger

logger = get_logger(__name__)

Filters = Mapping[str, Iterable[str]]


class FilterOperator(str, Enum):
    """How per-column results are combined by ``SheetTable.filter_rows``."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, operator: FilterOperator | str) -> FilterOperator:
        """Resolve an operator value, matching strings exactly.

        Raises:
            InvalidOperatorError: If ``operator`` is not "AND" or "OR".
        """
        if isinstance(operator, cls):
            return operator
        try:
            return cls(operator)
        except ValueError:
            error = InvalidOperatorError(operator, allowed=[op.value for op in cls])
            logger.log_error(error)
            raise error from None


class SheetTable:
    """One worksheet, loaded once and read-only afterwards.

    ``header`` maps zero-based column indexes to column names, taken from the
    sheet's first physical row. ``rows`` holds the remaining physical rows in
    sheet order, each as a :class:`CellRow` keyed by column name.
    """

    def __init__(
        self,
        name: str,
        header: Mapping[int, str],
        rows: Iterable[CellRow],
    ) -> None:
        self.name = name
        self._header: dict[int, str] = dict(header)
        self._rows: tuple[CellRow, ...] = tuple(row.freeze() for row in rows)

    @classmethod
    def from_decoded(cls, sheet: DecodedSheet) -> SheetTable | None:
        """Build a table from a decoded sheet.

        Returns None when the sheet has no header cells or no data row
        beneath its header.
        """
        if sheet.physical_row_count <= 1:
            return None

        header_index = sheet.first_row_index
        header_row = next(row for row in sheet.rows if row.row_index == header_index)
        header = {cell.column_index: cell.value for cell in header_row.cells}
        if not header:
            return None

        rows: list[CellRow] = []
        for physical_row in sheet.rows:
            if physical_row.row_index == header_index:
                continue
            row = CellRow()
            for cell in physical_row.cells:
                column_name = header.get(cell.column_index)
                if column_name is None:
                    logger.debug(
                        "Skipping cell outside header",
                        sheet=sheet.name,
                        row_index=physical_row.row_index,
                        column_index=cell.column_index,
                    )
                    continue
                row.set(column_name, cell.value)
            rows.append(row)

        return cls(sheet.name, header, rows)

    # ------------------------------------------------------------------ #
    # Header and rows
    # ------------------------------------------------------------------ #

    @property
    def header(self) -> Mapping[int, str]:
        return MappingProxyType(self._header)

    def get_header(self) -> Mapping[int, str]:
        """Return a read-only view of the column index to name mapping."""
        return self.header

    def get_column_name(self, column_index: int) -> str | None:
        return self._header.get(column_index)

    @property
    def columns(self) -> list[str]:
        """Distinct column names ordered by first column index.

        A name repeated in the header appears once. Rows keep a single cell
        for it, holding the value from the right-most column.
        """
        ordered = (self._header[index] for index in sorted(self._header))
        return list(dict.fromkeys(ordered))

    @property
    def rows(self) -> list[CellRow]:
        return list(self._rows)

    def get_rows(self) -> list[CellRow]:
        """Return every data row in sheet order, as a new list."""
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[CellRow]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return (
            f"SheetTable(name={self.name!r}, columns={len(self._header)}, "
            f"rows={len(self._rows)})"
        )

    # ------------------------------------------------------------------ #
    # Filtering
    # ------------------------------------------------------------------ #

    def rows_where(self, column_name: str, value: str) -> list[CellRow]:
        """Rows whose ``column_name`` cell equals ``value`` exactly.

        Rows without that cell never match.
        """
        return [row for row in self._rows if _cell_in(row, column_name, (value,))]

    def rows_where_in(self, column_name: str, values: Iterable[str]) -> list[CellRow]:
        """Rows whose ``column_name`` cell is one of ``values``."""
        accepted = _as_collection(values)
        return [row for row in self._rows if _cell_in(row, column_name, accepted)]

    def filter_rows(
        self,
        filters: Filters | None,
        operator: FilterOperator | str | None = None,
    ) -> list[CellRow]:
        """Rows matching several column filters combined with AND or OR.

        Args:
            filters: Column name to the values accepted for that column.
                An empty or missing mapping selects every row.
            operator: "AND" keeps rows matching every filter, "OR" keeps rows
                matching at least one. Defaults to
                ``settings.default_filter_operator``.

        Raises:
            InvalidOperatorError: If ``operator`` is not "AND" or "OR".
        """
        op = FilterOperator.parse(
            settings.default_filter_operator if operator is None else operator
        )
        if not filters:
            return list(self._rows)

        resolved = [
            (column_name, _as_collection(values))
            for column_name, values in filters.items()
        ]
        combine = all if op is FilterOperator.AND else any

        filtered: list[CellRow] = []
        for row in self._rows:
            matches = [_cell_in(row, column, accepted) for column, accepted in resolved]
            if combine(matches):
                filtered.append(row)
        return filtered

    @overload
    def get_rows_where(self, column_or_filters: str, values: str) -> list[CellRow]: ...

    @overload
    def get_rows_where(
        self, column_or_filters: str, values: Iterable[str]
    ) -> list[CellRow]: ...

    @overload
    def get_rows_where(
        self,
        column_or_filters: Filters | None,
        values: FilterOperator | str | None = None,
    ) -> list[CellRow]: ...

    def get_rows_where(
        self,
        column_or_filters: str | Filters | None,
        values: str | Iterable[str] | FilterOperator | None = None,
    ) -> list[CellRow]:
        """Dispatch to the filter matching the argument shape.

        - ``(column, "value")``: :meth:`rows_where`
        - ``(column, ["a", "b"])``: :meth:`rows_where_in`
        - ``(filters)`` or ``(filters, "AND" | "OR")``: :meth:`filter_rows`
        """
        if column_or_filters is None or isinstance(column_or_filters, Mapping):
            return self.filter_rows(column_or_filters, values)
        if not isinstance(column_or_filters, str):
            raise InvalidFilterError(
                "Expected a column name or a mapping of column filters, "
                f"got {type(column_or_filters).__name__}"
            )
        if isinstance(values, str):
            return self.rows_where(column_or_filters, values)
        if isinstance(values, Iterable):
            return self.rows_where_in(column_or_filters, values)
        raise InvalidFilterError(
            f"Expected a value or collection of values for column "
            f"'{column_or_filters}', got {type(values).__name__}",
            details={"column_name": column_or_filters},
        )

    # ------------------------------------------------------------------ #
    # Export
    # ------------------------------------------------------------------ #

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with one column per header name."""
        return pd.DataFrame(
            [row.to_dict() for row in self._rows],
            columns=self.columns,
        )


def _as_collection(values: Iterable[str]) -> Collection[str]:
    if isinstance(values, str):
        return (values,)
    if isinstance(values, (set, frozenset)):
        return values
    return frozenset(values)


def _cell_in(row: CellRow, column_name: str, accepted: Collection[str]) -> bool:
    value = row.get(column_name)
    return value is not None and value in accepted
