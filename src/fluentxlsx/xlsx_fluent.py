"""
Fluent configuration of a model type for tabular (XLSX) documents.

A ``ModelConfiguration`` holds one ``PropertyConfiguration`` per configured
member of the model plus the sheet-level statistics, filter and freeze
settings. It is built once during setup and then handed read-only to
writers and readers. It is not safe for concurrent mutation; build it on
one thread and share it only after the setup is finished.

Example:
    ```python
    fc = ModelConfiguration(Employee).from_annotations()
    fc.property(lambda e: e.salary).has_data_formatter("#,##0.00")
    fc.set_ignore("notes")
    fc.has_statistics("Total", "SUM", 3)
    fc.auto_index()
    ```
"""

import dis
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from typing_extensions import Self

from fluentxlsx import config

from .xlsx_common import (
    InvalidSelectorError,
    MemberDescriptor,
    MissingDeclaringTypeError,
    XLSXMemberAnalyzer,
    strip_format_string,
)
from .xlsx_property import CellConfig, PropertyConfiguration
from .xlsx_sheet import FilterConfig, FreezeConfig, StatisticsConfig

logger = logging.getLogger(__name__)

MemberSelector = str | Callable[[Any], Any]


# Member selection
@dataclass(frozen=True)
class _MemberAccess:
    """Result of a single attribute access on the recording proxy."""

    name: str


class _MemberRecorder:
    """Stand-in model instance that records attribute access."""

    def __init__(self, accessed: list[str]) -> None:
        # name-mangled so that it cannot shadow a model member
        object.__setattr__(self, "_MemberRecorder__accessed", accessed)

    def __getattr__(self, name: str) -> _MemberAccess:
        if name.startswith("__"):
            raise AttributeError(name)
        self.__accessed.append(name)
        return _MemberAccess(name)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"cannot assign member '{name}' in a selector"
        raise TypeError(msg)


# Instructions of a function body that only returns ``arg.member``
_MEMBER_ACCESS_OPNAMES = {
    "RESUME",
    "NOP",
    "EXTENDED_ARG",
    "LOAD_FAST",
    "LOAD_FAST_CHECK",
    "LOAD_FAST_BORROW",
    "LOAD_ATTR",
    "RETURN_VALUE",
}


def _check_selector_code(selector: Callable[[Any], Any]) -> None:
    """Reject function bodies that compute anything besides one member access.

    Pass-through expressions such as ``[m.a][0]`` cannot be told apart from
    ``m.a`` by calling the selector, so the bytecode is inspected instead.
    Callables without a code object (e.g. ``operator.attrgetter``) are only
    checked by calling them.
    """
    code = getattr(selector, "__code__", None)
    if code is None:
        return
    opnames = [instruction.opname for instruction in dis.get_instructions(code)]
    unexpected = sorted(set(opnames) - _MEMBER_ACCESS_OPNAMES)
    if unexpected:
        raise InvalidSelectorError(
            selector, f"not a member access (uses {', '.join(unexpected)})"
        )
    if opnames.count("LOAD_ATTR") != 1:
        raise InvalidSelectorError(selector, "must access exactly one member")


def resolve_selector(selector: MemberSelector) -> str:
    """Resolve a member selector to the member name.

    Accepts a member name or a callable such as ``lambda m: m.email``. Anything
    but a single direct member access raises ``InvalidSelectorError``.
    """
    if isinstance(selector, str):
        if not selector.isidentifier():
            raise InvalidSelectorError(selector, "not a valid member name")
        return selector
    if not callable(selector):
        raise InvalidSelectorError(selector, "must be a member name or a callable")

    _check_selector_code(selector)

    accessed: list[str] = []
    try:
        result = selector(_MemberRecorder(accessed))
    except Exception as e:
        # Method calls, arithmetic and nested access fail on the recorded value.
        raise InvalidSelectorError(selector, f"not a member access ({e})") from e

    if not isinstance(result, _MemberAccess) or accessed != [result.name]:
        raise InvalidSelectorError(selector, "must return a single member access")
    return result.name


class ModelConfiguration:
    """Fluent configuration for one model type."""

    def __init__(self, model: type):
        self._model = model
        self._members: tuple[MemberDescriptor, ...] = tuple(
            XLSXMemberAnalyzer.analyze_model(model)
        )
        self._member_names = {member.name for member in self._members}
        self._property_configs: dict[str, PropertyConfiguration] = {}
        self._statistics_configs: list[StatisticsConfig] = []
        self._filter_configs: list[FilterConfig] = []
        self._freeze_configs: list[FreezeConfig] = []

    def __repr__(self) -> str:
        return (
            f"ModelConfiguration({self._model.__name__}, "
            f"properties={list(self._property_configs)})"
        )

    @property
    def model(self) -> type:
        return self._model

    @property
    def members(self) -> Sequence[MemberDescriptor]:
        return self._members

    @property
    def property_configs(self) -> Mapping[str, PropertyConfiguration]:
        return self._property_configs

    @property
    def statistics_configs(self) -> Sequence[StatisticsConfig]:
        return self._statistics_configs

    @property
    def filter_configs(self) -> Sequence[FilterConfig]:
        return self._filter_configs

    @property
    def freeze_configs(self) -> Sequence[FreezeConfig]:
        return self._freeze_configs

    def _member_name(self, selector: MemberSelector) -> str:
        name = resolve_selector(selector)
        if name not in self._member_names:
            raise MissingDeclaringTypeError(self._model, name)
        return name

    def _get_or_create(self, name: str) -> PropertyConfiguration:
        pc = self._property_configs.get(name)
        if pc is None:
            pc = PropertyConfiguration(name)
            self._property_configs[name] = pc
            logger.debug(
                "Created property configuration for %s.%s", self._model.__name__, name
            )
        return pc

    def property(self, selector: MemberSelector) -> PropertyConfiguration:
        """Get the configuration of a member, creating it on first request."""
        return self._get_or_create(self._member_name(selector))

    def set_ignore(self, *selectors: MemberSelector | None) -> Self:
        """Ignore already configured members on export and import.

        Members without a configuration are skipped silently.
        """
        for selector in selectors:
            if selector is None:
                continue
            name = resolve_selector(selector)
            pc = self._property_configs.get(name)
            if pc is None:
                logger.debug("Not ignoring '%s': member has no configuration.", name)
                continue
            pc.is_ignored(True, True)
        return self

    def from_annotations(self) -> Self:
        """Apply XLSXDisplay and XLSXDisplayFormat annotations of all members.

        Titles and indices set fluently before this call are overwritten.
        """
        for member in self._members:
            pc = self._get_or_create(member.name)

            if member.display is not None:
                title = member.display.name
                pc.has_excel_title(member.name if title is None else title)
                if member.display.order is not None:
                    pc.has_excel_index(member.display.order)
            else:
                pc.has_excel_title(member.name)

            if member.display_format is not None:
                pc.has_data_formatter(
                    strip_format_string(member.display_format.data_format_string)
                )

            if not pc.cell_config.is_resolved:
                pc.has_auto_index()
        return self

    def _is_index_taken(self, index: int, member_name: str) -> bool:
        return any(
            pc.cell_config.index == index
            for name, pc in self._property_configs.items()
            if name != member_name
        )

    def auto_index(self) -> None:
        """Assign free column indices to auto-indexed members.

        Members are visited in declaration order. Indices held by any other
        configured member are skipped. Duplicate explicit indices are not
        detected.
        """
        index = 0
        for member in self._members:
            pc = self._property_configs.get(member.name)
            if pc is None:
                continue

            cc = pc.cell_config
            if cc.is_export_ignored or not cc.auto_index:
                continue

            while self._is_index_taken(index, member.name):
                index += 1

            cc.index = index
            logger.debug("Auto index %d assigned to '%s'", index, member.name)
            index += 1

    def has_statistics(self, name: str, formula: str, *column_indexes: int) -> Self:
        """Add a vertical statistics row.

        Args:
            name: Label of the row (e.g. "Total"), written to its first cell.
            formula: Excel function applied per column, e.g. "SUM" or "AVERAGE".
            column_indexes: Zero-based columns the formula is applied to.
        """
        self._statistics_configs.append(
            StatisticsConfig(name=name, formula=formula, columns=tuple(column_indexes))
        )
        return self

    def has_filter(
        self,
        first_column: int,
        last_column: int,
        first_row: int,
        last_row: int | None = None,
    ) -> Self:
        """Add an auto-filter region; ``last_row=None`` is resolved on write."""
        self._filter_configs.append(
            FilterConfig(
                first_column=first_column,
                last_column=last_column,
                first_row=first_row,
                last_row=last_row,
            )
        )
        return self

    def has_freeze(
        self, column_split: int, row_split: int, left_most_column: int, top_most_row: int
    ) -> Self:
        """Add a frozen-pane split point."""
        self._freeze_configs.append(
            FreezeConfig(
                column_split=column_split,
                row_split=row_split,
                left_most_column=left_most_column,
                top_most_row=top_most_row,
            )
        )
        return self

    # Read-only contract for writers and readers
    def _resolved_columns(self) -> list[tuple[str, CellConfig]]:
        columns = [
            (member.name, self._property_configs[member.name].cell_config)
            for member in self._members
            if member.name in self._property_configs
        ]
        # sort is stable: equal indices keep declaration order
        return sorted(
            (column for column in columns if column[1].is_resolved),
            key=lambda column: column[1].index,
        )

    def export_columns(self) -> list[tuple[str, CellConfig]]:
        """Members written on export, ordered by column index."""
        return [
            (name, cc) for name, cc in self._resolved_columns() if not cc.is_export_ignored
        ]

    def import_columns(self) -> list[tuple[str, CellConfig]]:
        """Members read on import, ordered by column index."""
        return [
            (name, cc) for name, cc in self._resolved_columns() if not cc.is_import_ignored
        ]

    def header_row(self) -> dict[int, str]:
        """Header text per column index; suppressed headers are left out."""
        headers = {}
        for name, cc in self.export_columns():
            text = cc.header_text(name)
            if text is not None:
                headers[cc.index] = text
        return headers

    def formatter_for(self, member_name: str) -> str | None:
        """Format pattern of a member, falling back to the date format setting."""
        pc = self._property_configs.get(member_name)
        if pc is not None and pc.cell_config.formatter is not None:
            return pc.cell_config.formatter

        member = next((m for m in self._members if m.name == member_name), None)
        if member is None:
            raise MissingDeclaringTypeError(self._model, member_name)
        field_type = XLSXMemberAnalyzer.unwrap_optional(member.field_type)
        if isinstance(field_type, type) and issubclass(field_type, date):
            return config.SETTINGS.date_formatter
        return None
