"""
Tests for the xlsx_api module.

This module tests the configuration registry and the helper that adds
display/format annotations to existing pydantic models.
"""

import logging

import pytest
from pydantic import BaseModel, Field, ValidationError

from fluentxlsx.xlsx_api import build, create_xlsx_wrapper, for_model, reset_registry
from fluentxlsx.xlsx_common import XLSXDisplay, XLSXDisplayFormat
from fluentxlsx.xlsx_fluent import ModelConfiguration

from conftest import Employee, Measurement, Person


class TestRegistry:
    """Tests for for_model, build and reset_registry."""

    def test_for_model_is_cached(self, registry):
        fc = for_model(Person)
        assert isinstance(fc, ModelConfiguration)
        assert for_model(Person) is fc
        assert for_model(Measurement) is not fc

    def test_annotations_imported(self, registry):
        fc = for_model(Employee)
        assert fc.property_configs["full_name"].cell_config.index == 3
        assert fc.property_configs["hire_date"].cell_config.formatter == "yyyy-MM-dd"

    def test_annotations_disabled(self, registry, temp_config):
        temp_config.load_config(
            settings=temp_config.XLSXSettings(from_annotations=False)
        )
        assert for_model(Employee).property_configs == {}

    def test_build_runs_auto_index(self, registry):
        for_model(Person).property("Name").has_excel_index(0)
        fc = build(Person)
        assert fc is for_model(Person)
        assert [name for name, _ in fc.export_columns()] == ["Name", "Id", "Email"]

    def test_build_without_auto_index(self, registry, temp_config):
        temp_config.load_config(settings=temp_config.XLSXSettings(auto_index=False))
        fc = build(Person)
        assert fc.export_columns() == []

    def test_reset(self, registry):
        fc = for_model(Person)
        reset_registry()
        assert for_model(Person) is not fc

    def test_registration_is_logged(self, registry, caplog):
        with caplog.at_level(logging.DEBUG):
            for_model(Person)
            for_model(Person)
        assert caplog.text.count("Registered configuration for Person") == 1


class TestXLSXWrapper:
    """Tests for create_xlsx_wrapper."""

    class Reading(BaseModel):
        station: str
        level: float = Field(0.0, ge=0)
        comment: str | None = None

    def test_wrapper_annotations(self):
        XLSXReading = create_xlsx_wrapper(
            self.Reading,
            {
                "level": [XLSXDisplay(name="Level", order=0), XLSXDisplayFormat("{0:0.0}")],
            },
        )
        assert XLSXReading.__name__ == "XLSXReading"
        assert issubclass(XLSXReading, self.Reading)

        fc = ModelConfiguration(XLSXReading).from_annotations()
        fc.auto_index()
        assert fc.header_row() == {0: "Level", 1: "station", 2: "comment"}
        assert fc.property_configs["level"].cell_config.formatter == "0.0"

    def test_wrapper_keeps_defaults_and_constraints(self):
        XLSXReading = create_xlsx_wrapper(
            self.Reading, {"level": [XLSXDisplay(name="Level")]}
        )
        reading = XLSXReading(station="A")
        assert reading.level == 0.0
        assert reading.comment is None
        with pytest.raises(ValidationError):
            XLSXReading(station="A", level=-1)

    def test_original_model_unchanged(self):
        create_xlsx_wrapper(self.Reading, {"station": [XLSXDisplay(name="Station")]})
        fc = ModelConfiguration(self.Reading).from_annotations()
        assert fc.property_configs["station"].cell_config.title == "station"

    def test_unknown_field(self):
        with pytest.raises(ValueError, match=r"Fields \['depth'\] are not declared"):
            create_xlsx_wrapper(self.Reading, {"depth": [XLSXDisplay(name="Depth")]})
