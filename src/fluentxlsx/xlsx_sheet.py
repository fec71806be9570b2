"""
Sheet-level configuration: statistics rows, auto-filter regions and frozen panes.

All row and column coordinates are zero-based, like ``CellConfig.index``.
The helpers translate them into A1 references for writers.
"""

from dataclasses import dataclass

from openpyxl.utils import get_column_letter


def cell_reference(column: int, row: int) -> str:
    """A1 reference for a zero-based column and row."""
    return f"{get_column_letter(column + 1)}{row + 1}"


@dataclass(frozen=True)
class StatisticsConfig:
    """A summary row applying ``formula`` (e.g. SUM, AVERAGE) to ``columns``.

    Only vertical statistics are supported. Writers place ``name`` in the first
    cell of the row after the last data row.
    """

    name: str
    formula: str
    columns: tuple[int, ...] = ()

    def cell_formulas(self, first_row: int, last_row: int) -> dict[int, str]:
        """Formula text per configured column, e.g. ``{1: "=SUM(B2:B10)"}``."""
        return {
            column: (
                f"={self.formula}("
                f"{cell_reference(column, first_row)}:{cell_reference(column, last_row)})"
            )
            for column in self.columns
        }


@dataclass(frozen=True)
class FilterConfig:
    """A rectangular auto-filter region.

    ``last_row=None`` means the last row is resolved when the sheet is written.
    """

    first_column: int
    last_column: int
    first_row: int
    last_row: int | None = None

    def ref(self, dynamic_last_row: int | None = None) -> str:
        """A1 range of the filter, e.g. ``"A1:D11"``."""
        last_row = self.last_row if self.last_row is not None else dynamic_last_row
        if last_row is None:
            msg = "Filter has no last row; pass the last row of the written data."
            raise ValueError(msg)
        return (
            f"{cell_reference(self.first_column, self.first_row)}:"
            f"{cell_reference(self.last_column, last_row)}"
        )


@dataclass(frozen=True)
class FreezeConfig:
    """A frozen-pane split point."""

    column_split: int
    row_split: int
    left_most_column: int
    top_most_row: int

    @property
    def freeze_cell(self) -> str:
        """First unfrozen cell, as used by ``Worksheet.freeze_panes``."""
        return cell_reference(self.column_split, self.row_split)

    @property
    def top_left_cell(self) -> str:
        """Top-left visible cell of the scrollable pane."""
        return cell_reference(self.left_most_column, self.top_most_row)
