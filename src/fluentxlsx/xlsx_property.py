"""
Per-property cell configuration.

A ``PropertyConfiguration`` wraps exactly one ``CellConfig`` and exposes the
fluent mutators used to place, title, format, merge and ignore the column of
one model member.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from typing_extensions import Self


@dataclass
class CellConfig:
    """Cell placement and format state of one model member.

    ``index is None`` (or a negative index) means the column index is
    unresolved and may be assigned by the auto-index pass. At most one of an
    explicit ``index`` and ``auto_index`` is authoritative at a time.
    """

    index: int | None = None
    auto_index: bool = False
    title: str | None = None
    formatter: str | None = None
    convert: Callable[[Any], Any] | None = None
    allow_merge: bool = False
    is_export_ignored: bool = False
    is_import_ignored: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.index is not None and self.index >= 0

    def header_text(self, member_name: str) -> str | None:
        """Header text for the column, or None if the header is suppressed.

        A ``None`` title falls back to the member name, an empty title
        suppresses writing the header cell.
        """
        if self.title is None:
            return member_name
        if self.title == "":
            return None
        return self.title

    def apply_convert(self, value: Any) -> Any:
        if self.convert is None:
            return value
        return self.convert(value)


class PropertyConfiguration:
    """Fluent configuration of the cell for one model member."""

    def __init__(self, member_name: str):
        self.member_name = member_name
        self.cell_config = CellConfig()

    def __repr__(self) -> str:
        return f"PropertyConfiguration({self.member_name!r}, {self.cell_config!r})"

    def has_convert(self, convert: Callable[[Any], Any] | None) -> Self:
        """Set the transform applied to the value before it is written."""
        self.cell_config.convert = convert
        return self

    def has_excel_index(self, index: int) -> Self:
        """Place the column at an explicit zero-based index.

        This disables automatic index assignment for the member.
        """
        self.cell_config.index = index
        self.cell_config.auto_index = False
        return self

    def has_excel_title(self, title: str | None) -> Self:
        """Set the header title.

        ``None`` falls back to the member name, ``""`` suppresses the header.
        """
        self.cell_config.title = title
        return self

    def has_data_formatter(self, formatter: str | None) -> Self:
        """Set the number/date format pattern, e.g. ``"yyyy-MM-dd"``."""
        self.cell_config.formatter = formatter
        return self

    def has_auto_index(self) -> Self:
        """Let the auto-index pass assign the column index."""
        self.cell_config.auto_index = True
        self.cell_config.index = None
        return self

    def is_merge_enabled(self) -> Self:
        """Allow merging vertically adjacent cells with equal values."""
        self.cell_config.allow_merge = True
        return self

    def is_ignored(self, exporting: bool, importing: bool) -> Self:
        """Suppress the member on export and/or import."""
        self.cell_config.is_export_ignored = exporting
        self.cell_config.is_import_ignored = importing
        return self

    def has_excel_cell(
        self,
        index: int,
        title: str | None,
        formatter: str | None = None,
        allow_merge: bool = False,
    ) -> Self:
        """Configure explicit index, title, formatter and merging in one call."""
        self.cell_config.index = index
        self.cell_config.title = title
        self.cell_config.formatter = formatter
        self.cell_config.auto_index = False
        self.cell_config.allow_merge = allow_merge
        return self

    def has_auto_index_excel_cell(
        self,
        title: str | None,
        formatter: str | None = None,
        allow_merge: bool = False,
    ) -> Self:
        """Configure title, formatter and merging, leaving the index to auto-index."""
        self.cell_config.index = None
        self.cell_config.title = title
        self.cell_config.formatter = formatter
        self.cell_config.auto_index = True
        self.cell_config.allow_merge = allow_merge
        return self

    def ignored_cell(
        self,
        index: int | None,
        title: str | None,
        formatter: str | None = None,
        exporting: bool = True,
        importing: bool = True,
    ) -> Self:
        """Configure a placed cell that is skipped on export and/or import."""
        self.cell_config.index = index
        self.cell_config.title = title
        self.cell_config.formatter = formatter
        self.cell_config.is_export_ignored = exporting
        self.cell_config.is_import_ignored = importing
        return self
