#!/usr/bin/env python3
"""
Demo: Fluent Column Configuration and a Minimal Table Writer

This demo configures how an Employee model maps to the columns of a table and
then writes a sheet with openpyxl, following the configuration contract.

Features demonstrated:
- Display and format annotations on model fields
- Fluent overrides after importing annotation defaults
- Ignoring members and automatic column indices
- Statistics rows, auto-filter and frozen panes
"""

import logging
from datetime import date
from enum import Enum
from itertools import groupby
from pathlib import Path
from typing import Annotated

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from pydantic import BaseModel, Field

from fluentxlsx import setup_logging
from fluentxlsx.xlsx_common import XLSXDisplay, XLSXDisplayFormat
from fluentxlsx.xlsx_fluent import ModelConfiguration

logger = logging.getLogger(__name__)


class Department(Enum):
    ENGINEERING = "engineering"
    SALES = "sales"


class Employee(BaseModel):
    """Employee model for the demonstration."""

    employee_id: Annotated[int, XLSXDisplay(name="ID", order=0)]
    department: Department
    name: Annotated[str, XLSXDisplay(name="Name")]
    hire_date: Annotated[date, XLSXDisplayFormat("{0:yyyy-MM-dd}")]
    salary: Annotated[float, XLSXDisplayFormat("{0:#,##0.00}")]
    password_hash: str = Field("", description="Never exported")


def configure() -> ModelConfiguration:
    fc = ModelConfiguration(Employee).from_annotations()
    fc.property(lambda e: e.department).has_excel_title("Department").has_convert(
        lambda d: d.value
    ).is_merge_enabled()
    fc.property(lambda e: e.salary).has_excel_title("Salary (USD)")
    fc.set_ignore(lambda e: e.password_hash)
    fc.has_statistics("Total", "SUM", 4).has_filter(0, 4, 0).has_freeze(0, 1, 0, 1)
    fc.auto_index()
    return fc


def write_table(fc: ModelConfiguration, data: list[Employee], filepath: Path) -> None:
    """Write records to a sheet as described by the configuration."""
    wb = Workbook()
    ws = wb.active
    ws.title = fc.model.__name__

    for index, title in fc.header_row().items():
        ws.cell(row=1, column=index + 1, value=title)

    columns = fc.export_columns()
    for row_idx, record in enumerate(data, start=2):
        for name, cc in columns:
            cell = ws.cell(row=row_idx, column=cc.index + 1)
            cell.value = cc.apply_convert(getattr(record, name))
            formatter = fc.formatter_for(name)
            if formatter:
                cell.number_format = formatter

    last_row = len(data)  # zero-based, the header is row 0
    for name, cc in columns:
        if not cc.allow_merge:
            continue
        row = 2
        for _value, group in groupby(data, key=lambda record: getattr(record, name)):
            size = len(list(group))
            if size > 1:
                ws.merge_cells(
                    start_row=row,
                    start_column=cc.index + 1,
                    end_row=row + size - 1,
                    end_column=cc.index + 1,
                )
            row += size

    for offset, stats in enumerate(fc.statistics_configs, start=1):
        stats_row = last_row + offset
        ws.cell(row=stats_row + 1, column=1, value=stats.name)
        for column, formula in stats.cell_formulas(1, last_row).items():
            ws.cell(row=stats_row + 1, column=column + 1, value=formula)

    for filter_config in fc.filter_configs:
        ws.auto_filter.ref = filter_config.ref(dynamic_last_row=last_row)
    for freeze in fc.freeze_configs:
        ws.freeze_panes = freeze.freeze_cell

    for _name, cc in columns:
        ws.column_dimensions[get_column_letter(cc.index + 1)].width = 16

    wb.save(filepath)
    logger.info("Wrote %d rows to %s", len(data), filepath)


def main():
    setup_logging()
    fc = configure()
    for name, cc in fc.export_columns():
        logger.info("Column %d: %s (%s)", cc.index, cc.header_text(name), name)

    data = [
        Employee(
            employee_id=1,
            department=Department.ENGINEERING,
            name="Ada",
            hire_date=date(2021, 3, 1),
            salary=91000,
            password_hash="x",
        ),
        Employee(
            employee_id=2,
            department=Department.ENGINEERING,
            name="Grace",
            hire_date=date(2019, 7, 15),
            salary=98000,
        ),
        Employee(
            employee_id=3,
            department=Department.SALES,
            name="Linus",
            hire_date=date(2023, 1, 9),
            salary=72000,
        ),
    ]
    write_table(fc, data, Path("demo_fluent_configuration.xlsx"))


if __name__ == "__main__":
    main()
