"""A single data row of a sheet, keyed by column name."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from excalibur.utils.exceptions import ImmutableRowError


class CellRow(Mapping[str, str]):
    """Ordered mapping from column name to the cell's string value.

    Rows are filled with ``set`` while a sheet is scanned and frozen once
    the physical row is exhausted. Writing the same column twice keeps the
    last value.
    """

    __slots__ = ("_cells", "_frozen")

    def __init__(self, cells: Mapping[str, str] | None = None) -> None:
        self._cells: dict[str, str] = dict(cells) if cells else {}
        self._frozen = False

    def set(self, column_name: str, value: str) -> None:
        """Store ``value`` under ``column_name``.

        Raises:
            ImmutableRowError: If the row has been frozen.
        """
        if self._frozen:
            raise ImmutableRowError(column_name)
        self._cells[column_name] = value

    def freeze(self) -> CellRow:
        """Make the row read-only and return it."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def to_dict(self) -> dict[str, str]:
        """Return a plain, mutable copy of the row."""
        return dict(self._cells)

    def __getitem__(self, column_name: str) -> str:
        return self._cells[column_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CellRow):
            return self._cells == other._cells
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CellRow({self._cells!r})"
