# Common pytest fixtures for all test modules
from dataclasses import dataclass
from datetime import date, datetime
from typing import Annotated

import pytest
from pydantic import BaseModel, Field

from fluentxlsx import config
from fluentxlsx.xlsx_api import reset_registry
from fluentxlsx.xlsx_common import XLSXDisplay, XLSXDisplayFormat


# Test Models
class Person(BaseModel):
    """Plain model without annotations, declared as Id, Name, Email."""

    Id: int
    Name: str
    Email: str


class Employee(BaseModel):
    """Test model with display and format annotations."""

    employee_id: Annotated[int, XLSXDisplay(name="Employee ID")]
    full_name: Annotated[str, XLSXDisplay(name="Name", order=3)]
    email: str
    hire_date: Annotated[date, XLSXDisplayFormat("{0:yyyy-MM-dd}")]
    salary: Annotated[
        float,
        XLSXDisplay(name="Salary", order=0),
        XLSXDisplayFormat("{0:#,##0.00}"),
    ]
    notes: str | None = Field(None, description="Free text")


@dataclass
class Measurement:
    """Dataclass model with annotations."""

    sample: Annotated[str, XLSXDisplay(name="Sample")]
    taken_at: datetime | None
    value: Annotated[float, XLSXDisplayFormat("{:,.2f}")] = 0.0


@pytest.fixture
def temp_config():
    """
    Provides a temporary config that can be safely changed in test functions.

    After the test the config will be reset to default.
    """
    yield config

    # Reset the globally changed config to default.
    config.load_config()


@pytest.fixture
def registry():
    """Empty configuration registry, cleared again after the test."""
    reset_registry()
    yield
    reset_registry()
